"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_settings.domain.models import GlobalSettings


class SettingsRepositoryProtocol(Protocol):
    async def get_settings(self, db: AsyncSession) -> GlobalSettings | None: ...

    async def save_settings(
        self, db: AsyncSession, settings: GlobalSettings, expected_version: int
    ) -> GlobalSettings | None:
        """Compare-and-swap write. Returns None when ``expected_version`` is stale."""
        ...
