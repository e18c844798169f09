"""Payment status derivation and payment application.

Status depends only on (amount_paid, total_charges):
    paid == 0      -> DUE
    paid <  total  -> PARTIALLY_PAID
    paid == total  -> PAID
    paid >  total  -> OVERPAID
"""

from dataclasses import replace
from datetime import datetime

from src.hb_billing.domain.models import LedgerEntry
from src.hb_common.enums import PaymentStatus


def derive_payment_status(amount_paid: int, total_charges: int) -> PaymentStatus:
    if amount_paid == 0:
        return PaymentStatus.DUE
    if amount_paid < total_charges:
        return PaymentStatus.PARTIALLY_PAID
    if amount_paid == total_charges:
        return PaymentStatus.PAID
    return PaymentStatus.OVERPAID


def apply_payment(
    entry: LedgerEntry,
    requested_amount: int,
    note: str | None,
    now: datetime,
) -> LedgerEntry:
    """Replace the cumulative amount paid against ``entry``.

    Negative amounts clamp to 0. Charge components are never touched; the
    existing note is kept when ``note`` is None.
    """
    amount_paid = max(0, requested_amount)
    return replace(
        entry,
        amount_paid=amount_paid,
        current_outstanding=entry.previous_outstanding + entry.total_charges - amount_paid,
        status=derive_payment_status(amount_paid, entry.total_charges).value,
        note=note if note is not None else entry.note,
        last_payment_at=now if amount_paid > 0 else entry.last_payment_at,
        updated_at=now,
    )
