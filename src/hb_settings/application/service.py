"""SettingsService — versioned access to the GlobalSettings singleton.

Every write is a compare-and-swap on ``version``. Admin edits surface a
conflict as StaleConfigurationError; system bookkeeping (active counters)
re-reads and retries; billing-period rollover reports the conflict to its
caller instead of raising.

Transaction ownership: ``update_settings`` commits. The bookkeeping helpers
run inside the caller's transaction and never commit.
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings as app_settings
from src.hb_common.errors import GlobalSettingsNotFoundError, StaleConfigurationError
from src.hb_settings.application.schemas import UpdateSettingsRequest
from src.hb_settings.domain.models import ActiveMemberCounts, GlobalSettings
from src.hb_settings.domain.repository import SettingsRepositoryProtocol
from src.hb_settings.infrastructure.persistence import SettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, repo: SettingsRepositoryProtocol | None = None) -> None:
        self._repo: SettingsRepositoryProtocol = repo or SettingsRepository()

    async def load(self, db: AsyncSession) -> GlobalSettings:
        current = await self._repo.get_settings(db)
        if current is None:
            raise GlobalSettingsNotFoundError()
        return current

    async def update_settings(
        self, db: AsyncSession, body: UpdateSettingsRequest
    ) -> GlobalSettings:
        current = await self.load(db)
        if current.version != body.expected_version:
            raise StaleConfigurationError(body.expected_version, current.version)

        changes = body.model_dump(exclude_unset=True, exclude={"expected_version"})
        merged = replace(current, **changes)
        try:
            saved = await self._repo.save_settings(db, merged, body.expected_version)
            if saved is None:
                latest = await self.load(db)
                raise StaleConfigurationError(body.expected_version, latest.version)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Global settings updated to version %d", saved.version)
        return saved

    async def adjust_active_counts(
        self,
        db: AsyncSession,
        change: Callable[[ActiveMemberCounts], ActiveMemberCounts],
    ) -> GlobalSettings:
        """Apply ``change`` to the active counters, retrying on version conflicts."""
        attempts = max(1, app_settings.SETTINGS_CAS_MAX_RETRIES)
        seen_version = -1
        for _ in range(attempts):
            current = await self.load(db)
            seen_version = current.version
            updated = current.with_counts(change(current.active_member_counts))
            saved = await self._repo.save_settings(db, updated, seen_version)
            if saved is not None:
                return saved
            logger.warning("Active-member counters conflict at version %d, retrying", seen_version)
        latest = await self.load(db)
        raise StaleConfigurationError(seen_version, latest.version)

    async def roll_over(
        self, db: AsyncSession, current: GlobalSettings, billing_month: str
    ) -> GlobalSettings | None:
        """Advance current/next billing months past ``billing_month``.

        Returns the settings unchanged when no rollover is needed, the new
        settings on success, and None when ``current`` is stale.
        """
        if not current.needs_rollover_to(billing_month):
            return current
        saved = await self._repo.save_settings(
            db, current.rolled_over_to(billing_month), current.version
        )
        if saved is not None:
            logger.info(
                "Billing period rolled over: current=%s next=%s",
                saved.current_billing_month,
                saved.next_billing_month,
            )
        return saved
