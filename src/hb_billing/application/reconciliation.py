"""Saga compensation and the balance-identity report.

When a member balance write fails after its ledger entry was committed, the
entry is flagged ``pending_reconciliation``. Nothing repairs it
automatically; ``ReconciliationService.report`` lists what needs attention.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_billing.application.schemas import (
    BalanceMismatchItem,
    InvariantReportResponse,
    PendingEntryItem,
)
from src.hb_billing.domain.invariants import find_balance_mismatches
from src.hb_billing.domain.repository import LedgerRepositoryProtocol
from src.hb_billing.infrastructure.persistence import LedgerRepository
from src.hb_member.domain.repository import MemberRepositoryProtocol
from src.hb_member.infrastructure.persistence import MemberRepository

logger = logging.getLogger(__name__)


async def mark_for_reconciliation(
    ledger: LedgerRepositoryProtocol,
    db: AsyncSession,
    member_id: str,
    billing_month: str,
) -> bool:
    """Flag the entry in its own transaction. Returns False if even that failed."""
    try:
        await ledger.mark_pending_reconciliation(db, member_id, billing_month, True)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.error(
            "Compensation failed: could not flag %s/%s for reconciliation",
            member_id,
            billing_month,
            exc_info=True,
        )
        return False
    logger.warning("Ledger entry %s/%s flagged pending reconciliation", member_id, billing_month)
    return True


class ReconciliationService:
    def __init__(
        self,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        member_repo: MemberRepositoryProtocol | None = None,
    ) -> None:
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._members: MemberRepositoryProtocol = member_repo or MemberRepository()

    async def report(self, db: AsyncSession) -> InvariantReportResponse:
        members = await self._members.list_members(db, include_inactive=True)
        latest = await self._ledger.latest_per_member(db)
        mismatches = find_balance_mismatches(members, latest)
        pending = await self._ledger.list_pending_reconciliation(db)
        return InvariantReportResponse(
            consistent=not mismatches and not pending,
            mismatches=[
                BalanceMismatchItem(
                    member_id=m.member_id,
                    member_name=m.member_name,
                    billing_month=m.billing_month,
                    outstanding_balance=m.outstanding_balance,
                    ledger_outstanding=m.ledger_outstanding,
                    difference=m.difference,
                )
                for m in mismatches
            ],
            pending_reconciliation=[
                PendingEntryItem(
                    member_id=e.member_id,
                    billing_month=e.billing_month,
                    current_outstanding=e.current_outstanding,
                )
                for e in pending
            ],
        )
