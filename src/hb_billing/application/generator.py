"""BillingCycleGenerator — one ledger entry per active member for a period.

Per member, in order:
  1. skip if an entry for (member, month) exists (also when a concurrent run
     inserts it first: ON CONFLICT DO NOTHING returns nothing)
  2. insert the DUE entry and commit
  3. compare-and-swap the member balance to the entry's current_outstanding
     and commit; on conflict or failure flag the entry pending reconciliation

A failing member is recorded in ``errors`` and the loop moves on. After the
loop the ElectricBill for the period is upserted and the billing period
rolled over; failures there are reported in ``errors`` as well and nothing
already written is undone.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_billing.application.reconciliation import mark_for_reconciliation
from src.hb_billing.domain.charges import build_ledger_entry
from src.hb_billing.domain.models import (
    BillingRun,
    ElectricBill,
    FloorCost,
    GenerationResult,
)
from src.hb_billing.domain.repository import (
    ElectricBillRepositoryProtocol,
    LedgerRepositoryProtocol,
)
from src.hb_billing.infrastructure.persistence import ElectricBillRepository, LedgerRepository
from src.hb_common.datetime_utils import is_billing_month, utc_now
from src.hb_common.errors import BalanceConflictError, NoActiveMembersError, ValidationError
from src.hb_member.domain.models import Member
from src.hb_member.domain.repository import MemberRepositoryProtocol
from src.hb_member.infrastructure.persistence import MemberRepository
from src.hb_settings.application.service import SettingsService
from src.hb_settings.domain.models import GlobalSettings

logger = logging.getLogger(__name__)


class BillingCycleGenerator:
    def __init__(
        self,
        member_repo: MemberRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        electric_repo: ElectricBillRepositoryProtocol | None = None,
        settings_service: SettingsService | None = None,
    ) -> None:
        self._members: MemberRepositoryProtocol = member_repo or MemberRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._electric: ElectricBillRepositoryProtocol = electric_repo or ElectricBillRepository()
        self._settings = settings_service or SettingsService()

    async def generate(
        self, db: AsyncSession, run: BillingRun, settings: GlobalSettings
    ) -> GenerationResult:
        """Run one bulk generation.

        Raises only for request-level problems (bad month, nobody to bill);
        per-member failures come back in ``GenerationResult.errors``.
        """
        if not is_billing_month(run.billing_month):
            raise ValidationError(f"billing_month must be YYYY-MM, got {run.billing_month!r}")

        members = await self._members.list_active(db)
        if not members:
            raise NoActiveMembersError()

        result = GenerationResult()
        for member in members:
            await self._bill_member(db, member, run, settings, result)

        await self._save_electric_bill(db, run, result)
        await self._roll_over(db, run.billing_month, settings, result)

        logger.info(
            "Billing run %s: generated=%d skipped=%d errors=%d",
            run.billing_month,
            result.generated_count,
            result.skipped_count,
            len(result.errors),
        )
        return result

    async def _bill_member(
        self,
        db: AsyncSession,
        member: Member,
        run: BillingRun,
        settings: GlobalSettings,
        result: GenerationResult,
    ) -> None:
        try:
            if await self._ledger.exists(db, member.id, run.billing_month):
                result.skipped_count += 1
                return
            entry = build_ledger_entry(member, run, settings.wifi_monthly_charge, utc_now())
            inserted = await self._ledger.insert(db, entry)
            if inserted is None:
                await db.rollback()
                result.skipped_count += 1
                return
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.exception("Ledger entry for member %s failed", member.id)
            result.errors.append(_member_error(member, exc))
            return

        try:
            saved = await self._members.compare_and_set_balance(
                db, member.id, member.version, inserted.current_outstanding
            )
            if saved is None:
                raise BalanceConflictError(member.id)
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.exception("Balance update for member %s failed", member.id)
            flagged = await mark_for_reconciliation(
                self._ledger, db, member.id, run.billing_month
            )
            suffix = "entry flagged for reconciliation" if flagged else "compensation failed"
            result.errors.append(f"{_member_error(member, exc)}; {suffix}")
            return

        result.generated_count += 1

    async def _save_electric_bill(
        self, db: AsyncSession, run: BillingRun, result: GenerationResult
    ) -> None:
        bill = ElectricBill(
            billing_month=run.billing_month,
            floor_costs={
                floor: FloorCost(bill=amount, total_members=run.floor_member_counts.get(floor, 0))
                for floor, amount in run.floor_electricity.items()
            },
            bulk_expenses=list(run.bulk_expenses),
        )
        try:
            await self._electric.upsert(db, bill)
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.exception("Electric bill for %s failed", run.billing_month)
            result.errors.append(f"Error saving electric bill for {run.billing_month}: {exc}")

    async def _roll_over(
        self,
        db: AsyncSession,
        billing_month: str,
        settings: GlobalSettings,
        result: GenerationResult,
    ) -> None:
        try:
            saved = await self._settings.roll_over(db, settings, billing_month)
            if saved is None:
                await db.rollback()
                result.errors.append(
                    f"Billing period not rolled over to {billing_month}: "
                    f"global settings changed since version {settings.version}"
                )
                return
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.exception("Billing period rollover to %s failed", billing_month)
            result.errors.append(f"Error rolling billing period over to {billing_month}: {exc}")


def _member_error(member: Member, exc: Exception) -> str:
    return f"Error generating bill for {member.name} ({member.id}): {exc}"
