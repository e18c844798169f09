"""Per-member charge computation for a billing run.

Electricity is the floor total split evenly over the floor's head-count,
rounded half up to the paisa once, here. Bulk expenses are pass-through.
"""

from datetime import datetime

from src.hb_billing.domain.models import BillingRun, BulkExpense, Expense, LedgerEntry, WifiOverride
from src.hb_common.enums import PaymentStatus
from src.hb_common.money import divide_round_half_up
from src.hb_member.domain.models import Member


def electricity_share(floor_total: int, member_count: int) -> int:
    if member_count <= 0:
        return 0
    return divide_round_half_up(floor_total, member_count)


def wifi_charge(
    member: Member, override: WifiOverride | None, wifi_monthly_charge: int
) -> int:
    if override is not None and member.id in override.member_ids:
        return override.amount
    if member.opted_for_wifi:
        return wifi_monthly_charge
    return 0


def expenses_for(member_id: str, bulk_expenses: tuple[BulkExpense, ...]) -> list[Expense]:
    return [
        Expense(description=b.description, amount=b.amount)
        for b in bulk_expenses
        if member_id in b.member_ids
    ]


def build_ledger_entry(
    member: Member,
    run: BillingRun,
    wifi_monthly_charge: int,
    now: datetime,
) -> LedgerEntry:
    """The DUE entry for ``member`` in ``run.billing_month``, using the balance read now."""
    electricity = electricity_share(
        run.floor_electricity.get(member.floor, 0),
        run.floor_member_counts.get(member.floor, 0),
    )
    wifi = wifi_charge(member, run.wifi_override, wifi_monthly_charge)
    expenses = expenses_for(member.id, run.bulk_expenses)
    total_charges = member.current_rent + electricity + wifi + sum(e.amount for e in expenses)
    return LedgerEntry(
        member_id=member.id,
        billing_month=run.billing_month,
        rent=member.current_rent,
        electricity=electricity,
        wifi=wifi,
        previous_outstanding=member.outstanding_balance,
        expenses=expenses,
        total_charges=total_charges,
        amount_paid=0,
        current_outstanding=member.outstanding_balance + total_charges,
        status=PaymentStatus.DUE.value,
        note=member.note,
        generated_at=now,
        updated_at=now,
    )
