"""Balance identity check.

A member's outstanding_balance must equal the current_outstanding of the
ledger entry written to most recently. Members without entries are skipped.
"""

from dataclasses import dataclass

from src.hb_billing.domain.models import LedgerEntry
from src.hb_member.domain.models import Member


@dataclass(frozen=True)
class BalanceMismatch:
    member_id: str
    member_name: str
    billing_month: str
    outstanding_balance: int
    ledger_outstanding: int

    @property
    def difference(self) -> int:
        return self.outstanding_balance - self.ledger_outstanding


def find_balance_mismatches(
    members: list[Member], latest_entries: dict[str, LedgerEntry]
) -> list[BalanceMismatch]:
    mismatches = []
    for member in members:
        entry = latest_entries.get(member.id)
        if entry is None or entry.current_outstanding == member.outstanding_balance:
            continue
        mismatches.append(
            BalanceMismatch(
                member_id=member.id,
                member_name=member.name,
                billing_month=entry.billing_month,
                outstanding_balance=member.outstanding_balance,
                ledger_outstanding=entry.current_outstanding,
            )
        )
    return mismatches
