"""Tests for the billing summary, member ledger pagination and reconciliation report."""

from datetime import UTC, date, datetime, timedelta

from src.hb_billing.application.reconciliation import ReconciliationService
from src.hb_billing.application.schemas import cursor_decode, cursor_encode
from src.hb_billing.application.summary import BillingQueryService, summarize_month
from src.hb_billing.domain.models import ElectricBill, FloorCost, LedgerEntry

from billing_fakes import (
    FakeElectricBillRepository,
    FakeLedgerRepository,
    FakeMemberRepository,
    make_db,
    make_member,
    make_settings,
)


def _entry(member_id: str, month: str, total: int, paid: int, paid_minute: int = 0) -> LedgerEntry:
    return LedgerEntry(
        member_id=member_id,
        billing_month=month,
        rent=total,
        electricity=0,
        wifi=0,
        previous_outstanding=0,
        expenses=[],
        total_charges=total,
        amount_paid=paid,
        current_outstanding=total - paid,
        status="DUE",
        last_payment_at=(
            datetime(2026, 3, 1, tzinfo=UTC) + timedelta(minutes=paid_minute) if paid else None
        ),
    )


class TestSummarizeMonth:
    def test_totals_and_rate(self) -> None:
        rows = [
            (_entry("m-1", "2026-03", 200000, 200000, 1), "A"),
            (_entry("m-2", "2026-03", 200000, 50000, 2), "B"),
            (_entry("m-3", "2026-03", 100000, 0), "C"),
        ]

        s = summarize_month("2026-03", rows, date(2026, 3, 12), 5)

        assert s.current_month.total_generated == 500000
        assert s.current_month.total_collected == 250000
        assert s.current_month.total_outstanding == 150000 + 100000
        assert s.current_month.payment_rate == 50.0

    def test_overpayment_does_not_reduce_others_outstanding(self) -> None:
        rows = [
            (_entry("m-1", "2026-03", 100000, 300000, 1), "A"),
            (_entry("m-2", "2026-03", 100000, 0), "B"),
        ]
        s = summarize_month("2026-03", rows, date(2026, 3, 1), 5)
        assert s.current_month.total_outstanding == 100000
        assert s.current_month.payment_rate == 150.0

    def test_nothing_generated(self) -> None:
        s = summarize_month("2026-03", [], date(2026, 3, 1), 5)
        assert s.current_month.payment_rate == 0.0
        assert s.recent_payments == []
        assert s.upcoming_dues == []

    def test_rate_rounded_to_two_places(self) -> None:
        rows = [(_entry("m-1", "2026-03", 300000, 100000, 1), "A")]
        assert summarize_month("2026-03", rows, date(2026, 3, 1), 5).current_month.payment_rate == 33.33

    def test_recent_payments_newest_first(self) -> None:
        rows = [
            (_entry("m-1", "2026-03", 100, 100, 5), "A"),
            (_entry("m-2", "2026-03", 100, 50, 9), "B"),
            (_entry("m-3", "2026-03", 100, 0), "C"),
        ]
        s = summarize_month("2026-03", rows, date(2026, 3, 1), 5)
        assert [p.member_id for p in s.recent_payments] == ["m-2", "m-1"]

    def test_dues_overdue_days_and_cap(self) -> None:
        rows = [(_entry(f"m-{i}", "2026-03", 1000 + i, 0), f"N{i}") for i in range(15)]

        s = summarize_month("2026-03", rows, date(2026, 3, 12), 5)

        assert len(s.upcoming_dues) == 10
        assert s.upcoming_dues[0].member_id == "m-14"
        assert s.upcoming_dues[0].due_date == "2026-03-05"
        assert all(d.days_overdue == 7 for d in s.upcoming_dues)

    def test_not_yet_due(self) -> None:
        rows = [(_entry("m-1", "2026-03", 1000, 0), "A")]
        s = summarize_month("2026-03", rows, date(2026, 3, 2), 5)
        assert s.upcoming_dues[0].days_overdue == 0


class TestBillingQueryService:
    async def test_summary_uses_current_billing_month(self) -> None:
        ledger = FakeLedgerRepository(names={"m-1": "Asha"})
        ledger.entries[("m-1", "2026-02")] = _entry("m-1", "2026-02", 1000, 500, 1)
        ledger.entries[("m-1", "2026-03")] = _entry("m-1", "2026-03", 9999, 0)
        svc = BillingQueryService(ledger_repo=ledger, electric_repo=FakeElectricBillRepository())

        s = await svc.billing_summary(make_db(), make_settings("2026-02"), date(2026, 3, 20))

        assert s.current_month.billing_month == "2026-02"
        assert s.current_month.total_generated == 1000
        assert s.recent_payments[0].member_name == "Asha"

    async def test_summary_falls_back_to_today(self) -> None:
        svc = BillingQueryService(
            ledger_repo=FakeLedgerRepository(), electric_repo=FakeElectricBillRepository()
        )
        s = await svc.billing_summary(make_db(), make_settings(None), date(2026, 7, 4))
        assert s.current_month.billing_month == "2026-07"

    async def test_current_electric_bill_is_latest_period(self) -> None:
        electric = FakeElectricBillRepository()
        for month in ("2026-01", "2026-03", "2026-02"):
            await electric.upsert(None, ElectricBill(month, {"2nd": FloorCost(100, 2)}))
        svc = BillingQueryService(ledger_repo=FakeLedgerRepository(), electric_repo=electric)

        bill = await svc.current_electric_bill(make_db())

        assert bill is not None
        assert bill.billing_month == "2026-03"
        assert bill.floor_costs["2nd"].total_members == 2

    async def test_no_electric_bill_yet(self) -> None:
        svc = BillingQueryService(
            ledger_repo=FakeLedgerRepository(), electric_repo=FakeElectricBillRepository()
        )
        assert await svc.current_electric_bill(make_db()) is None

    async def test_member_ledger_pages_newest_first(self) -> None:
        ledger = FakeLedgerRepository()
        for m in range(1, 6):
            month = f"2026-0{m}"
            ledger.entries[("m-1", month)] = _entry("m-1", month, 100, 0)
        svc = BillingQueryService(ledger_repo=ledger, electric_repo=FakeElectricBillRepository())

        first = await svc.member_ledger(make_db(), "m-1", None, 2)
        second = await svc.member_ledger(make_db(), "m-1", first.next_cursor, 2)
        third = await svc.member_ledger(make_db(), "m-1", second.next_cursor, 2)

        assert [e.billing_month for e in first.items] == ["2026-05", "2026-04"]
        assert [e.billing_month for e in second.items] == ["2026-03", "2026-02"]
        assert [e.billing_month for e in third.items] == ["2026-01"]
        assert (first.has_more, second.has_more, third.has_more) == (True, True, False)
        assert third.next_cursor is None


class TestCursor:
    def test_decode_encoded(self) -> None:
        assert cursor_decode(cursor_encode("2026-03")) == "2026-03"

    def test_none(self) -> None:
        assert cursor_decode(None) is None

    def test_garbage_is_ignored(self) -> None:
        assert cursor_decode("not-base64!!") is None


class TestReconciliationReport:
    async def test_reports_mismatch_and_pending(self) -> None:
        members = FakeMemberRepository(
            [
                make_member(member_id="m-1", name="A", outstanding_balance=1000),
                make_member(member_id="m-2", name="B", outstanding_balance=777),
                make_member(member_id="m-3", name="C", outstanding_balance=5),
            ]
        )
        ledger = FakeLedgerRepository()
        await ledger.insert(None, _entry("m-1", "2026-03", 1000, 0))
        pending = _entry("m-2", "2026-03", 1000, 0)
        await ledger.insert(None, pending)
        await ledger.mark_pending_reconciliation(None, "m-2", "2026-03", True)

        report = await ReconciliationService(ledger_repo=ledger, member_repo=members).report(make_db())

        assert report.consistent is False
        assert [m.member_id for m in report.mismatches] == ["m-2"]
        assert report.mismatches[0].difference == 777 - 1000
        assert [p.member_id for p in report.pending_reconciliation] == ["m-2"]

    async def test_consistent(self) -> None:
        members = FakeMemberRepository([make_member(outstanding_balance=1000)])
        ledger = FakeLedgerRepository()
        await ledger.insert(None, _entry("m-1", "2026-03", 1000, 0))

        report = await ReconciliationService(ledger_repo=ledger, member_repo=members).report(make_db())

        assert report.consistent is True
