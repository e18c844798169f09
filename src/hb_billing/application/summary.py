"""Read-side billing queries: period summary, member ledger, current electric bill.

Pure aggregation; nothing here writes.
"""

from datetime import date, datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings as app_settings
from src.hb_billing.application.schemas import (
    BillingSummaryResponse,
    ElectricBillResponse,
    LedgerEntryResponse,
    LedgerPageResponse,
    MonthTotals,
    RecentPaymentItem,
    UpcomingDueItem,
    cursor_decode,
    cursor_encode,
)
from src.hb_billing.domain.models import LedgerEntry
from src.hb_billing.domain.repository import (
    ElectricBillRepositoryProtocol,
    LedgerRepositoryProtocol,
)
from src.hb_billing.infrastructure.persistence import ElectricBillRepository, LedgerRepository
from src.hb_common.datetime_utils import billing_month_of, due_date_of
from src.hb_settings.domain.models import GlobalSettings

_TOP_N = 10
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def summarize_month(
    billing_month: str,
    rows: list[tuple[LedgerEntry, str]],
    today: date,
    due_day: int,
) -> BillingSummaryResponse:
    generated = sum(e.total_charges for e, _ in rows)
    collected = sum(e.amount_paid for e, _ in rows)
    outstanding = sum(max(0, e.total_charges - e.amount_paid) for e, _ in rows)
    rate = round(collected / generated * 100, 2) if generated > 0 else 0.0

    paid = sorted(
        (r for r in rows if r[0].amount_paid > 0),
        key=lambda r: r[0].last_payment_at or _EPOCH,
        reverse=True,
    )
    recent = [
        RecentPaymentItem(
            member_id=e.member_id,
            member_name=name,
            billing_month=e.billing_month,
            amount_paid=e.amount_paid,
            status=e.status,
            paid_at=e.last_payment_at.isoformat() if e.last_payment_at else None,
        )
        for e, name in paid[:_TOP_N]
    ]

    due_date = due_date_of(billing_month, due_day)
    days_overdue = max(0, (today - due_date).days)
    # Ordered by amount due, not days_overdue: every row is one period, so they share a due date.
    owing = sorted(
        (r for r in rows if r[0].total_charges - r[0].amount_paid > 0),
        key=lambda r: r[0].total_charges - r[0].amount_paid,
        reverse=True,
    )
    upcoming = [
        UpcomingDueItem(
            member_id=e.member_id,
            member_name=name,
            billing_month=e.billing_month,
            amount_due=e.total_charges - e.amount_paid,
            due_date=due_date.isoformat(),
            days_overdue=days_overdue,
            status=e.status,
        )
        for e, name in owing[:_TOP_N]
    ]

    return BillingSummaryResponse(
        current_month=MonthTotals(
            billing_month=billing_month,
            total_generated=generated,
            total_collected=collected,
            total_outstanding=outstanding,
            payment_rate=rate,
        ),
        recent_payments=recent,
        upcoming_dues=upcoming,
    )


class BillingQueryService:
    def __init__(
        self,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        electric_repo: ElectricBillRepositoryProtocol | None = None,
    ) -> None:
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._electric: ElectricBillRepositoryProtocol = electric_repo or ElectricBillRepository()

    async def billing_summary(
        self, db: AsyncSession, settings: GlobalSettings, today: date
    ) -> BillingSummaryResponse:
        period = settings.current_billing_month or billing_month_of(today)
        rows = await self._ledger.list_for_month(db, period)
        return summarize_month(period, rows, today, app_settings.BILL_DUE_DAY)

    async def current_electric_bill(self, db: AsyncSession) -> ElectricBillResponse | None:
        bill = await self._electric.get_latest(db)
        return ElectricBillResponse.from_domain(bill) if bill else None

    async def member_ledger(
        self, db: AsyncSession, member_id: str, cursor: str | None, limit: int
    ) -> LedgerPageResponse:
        before_month = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._ledger.list_for_member(db, member_id, before_month, limit + 1)
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].billing_month) if has_more and page else None
        return LedgerPageResponse(
            items=[LedgerEntryResponse.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
