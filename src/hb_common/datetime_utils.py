"""UTC datetime and billing-month utilities.

A billing month is the canonical string ``YYYY-MM``; lexical order equals
chronological order.
"""

import re
from datetime import date, datetime, timezone

_BILLING_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def is_billing_month(value: str) -> bool:
    return bool(_BILLING_MONTH_RE.match(value))


def parse_billing_month(value: str) -> tuple[int, int]:
    """'2026-03' -> (2026, 3). Raises ValueError on anything else."""
    match = _BILLING_MONTH_RE.match(value or "")
    if match is None:
        raise ValueError(f"Billing month must be YYYY-MM, got {value!r}")
    return int(match.group(1)), int(match.group(2))


def billing_month_of(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def next_billing_month(value: str) -> str:
    year, month = parse_billing_month(value)
    if month == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{month + 1:02d}"


def due_date_of(billing_month: str, due_day: int) -> date:
    year, month = parse_billing_month(billing_month)
    return date(year, month, due_day)


def add_years(day: date, years: int) -> date:
    """Same calendar day ``years`` later; 29 Feb falls back to 28 Feb."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)
