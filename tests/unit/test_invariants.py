from billing_fakes import make_member
from src.hb_billing.domain.invariants import find_balance_mismatches
from src.hb_billing.domain.models import LedgerEntry


def _entry(member_id: str, current_outstanding: int, month: str = "2026-02") -> LedgerEntry:
    return LedgerEntry(
        member_id=member_id,
        billing_month=month,
        rent=200000,
        electricity=0,
        wifi=0,
        previous_outstanding=0,
        expenses=[],
        total_charges=200000,
        amount_paid=200000 - current_outstanding,
        current_outstanding=current_outstanding,
        status="PARTIALLY_PAID",
    )


class TestBalanceMismatches:
    def test_consistent_members_pass(self) -> None:
        members = [make_member("m-1", outstanding_balance=50000)]
        assert find_balance_mismatches(members, {"m-1": _entry("m-1", 50000)}) == []

    def test_member_without_entries_is_skipped(self) -> None:
        members = [make_member("m-1", outstanding_balance=-30000)]
        assert find_balance_mismatches(members, {}) == []

    def test_mismatch_reports_difference(self) -> None:
        members = [
            make_member("m-1", outstanding_balance=50000),
            make_member("m-2", name="Ravi", outstanding_balance=70000),
        ]
        latest = {"m-1": _entry("m-1", 50000), "m-2": _entry("m-2", 20000, "2026-03")}

        [mismatch] = find_balance_mismatches(members, latest)

        assert mismatch.member_id == "m-2"
        assert mismatch.member_name == "Ravi"
        assert mismatch.billing_month == "2026-03"
        assert mismatch.difference == 50000
