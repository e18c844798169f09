"""Repository Protocol for the admin allowlist."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_gateway.admin.models import AdminEntry


class AdminRepositoryProtocol(Protocol):
    async def list_admins(self, db: AsyncSession) -> list[AdminEntry]: ...

    async def add_admin(self, db: AsyncSession, entry: AdminEntry) -> AdminEntry | None:
        """Insert; None when the user is already on the allowlist."""
        ...

    async def remove_admin(self, db: AsyncSession, user_id: str) -> bool: ...
