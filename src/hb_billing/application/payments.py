"""PaymentRecorder — set the amount paid against one ledger entry.

The entry update commits first. The member balance is then set to the
entry's new current_outstanding with a compare-and-swap; on a version
conflict the member is re-read and the write retried, since the target value
depends only on the entry. When retries run out the entry is flagged pending
reconciliation and BalanceConflictError is raised.

Each call replaces the cumulative amount paid for the period; it never adds to it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.hb_billing.application.reconciliation import mark_for_reconciliation
from src.hb_billing.domain.models import LedgerEntry
from src.hb_billing.domain.repository import LedgerRepositoryProtocol
from src.hb_billing.domain.status import apply_payment
from src.hb_billing.infrastructure.persistence import LedgerRepository
from src.hb_common.datetime_utils import utc_now
from src.hb_common.errors import (
    BalanceConflictError,
    LedgerEntryNotFoundError,
    MemberNotFoundError,
)
from src.hb_member.domain.models import Member
from src.hb_member.domain.repository import MemberRepositoryProtocol
from src.hb_member.infrastructure.persistence import MemberRepository

logger = logging.getLogger(__name__)


class PaymentRecorder:
    def __init__(
        self,
        member_repo: MemberRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
    ) -> None:
        self._members: MemberRepositoryProtocol = member_repo or MemberRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()

    async def record_payment(
        self,
        db: AsyncSession,
        member_id: str,
        billing_month: str,
        amount_paid: int,
        note: str | None = None,
    ) -> tuple[LedgerEntry, Member]:
        entry = await self._ledger.get(db, member_id, billing_month)
        if entry is None:
            raise LedgerEntryNotFoundError(member_id, billing_month)
        if await self._members.get(db, member_id) is None:
            raise MemberNotFoundError(member_id)

        updated = apply_payment(entry, amount_paid, note, utc_now())
        try:
            saved_entry = await self._ledger.save_payment(db, updated)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        member = await self._set_balance(db, saved_entry)
        logger.info(
            "Payment recorded: member=%s month=%s paid=%d status=%s outstanding=%d",
            member_id,
            billing_month,
            saved_entry.amount_paid,
            saved_entry.status,
            saved_entry.current_outstanding,
        )
        return saved_entry, member

    async def _set_balance(self, db: AsyncSession, entry: LedgerEntry) -> Member:
        attempts = max(1, settings.BALANCE_CAS_MAX_RETRIES)
        try:
            for attempt in range(1, attempts + 1):
                member = await self._members.get(db, entry.member_id)
                if member is None:
                    raise MemberNotFoundError(entry.member_id)
                saved = await self._members.compare_and_set_balance(
                    db, member.id, member.version, entry.current_outstanding
                )
                if saved is not None:
                    if entry.pending_reconciliation:
                        await self._ledger.mark_pending_reconciliation(
                            db, entry.member_id, entry.billing_month, False
                        )
                        entry.pending_reconciliation = False
                    await db.commit()
                    return saved
                await db.rollback()
                logger.warning(
                    "Balance conflict for member %s (attempt %d/%d)",
                    entry.member_id,
                    attempt,
                    attempts,
                )
        except Exception:
            await db.rollback()
            await mark_for_reconciliation(self._ledger, db, entry.member_id, entry.billing_month)
            raise

        await mark_for_reconciliation(self._ledger, db, entry.member_id, entry.billing_month)
        raise BalanceConflictError(entry.member_id)
