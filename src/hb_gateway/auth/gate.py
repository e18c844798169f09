"""AuthorizationGate — the admin check in front of every mutating operation.

The caller's identity is resolved upstream (JWT, see dependencies.py); the
gate only decides whether that identity is on the admin allowlist. Both
failures are fatal for the request and happen before any write.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_common.errors import (
    AdminConfigNotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from src.hb_gateway.admin.models import AdminEntry
from src.hb_gateway.admin.persistence import AdminRepository
from src.hb_gateway.admin.repository import AdminRepositoryProtocol


class AuthorizationGate:
    def __init__(self, repo: AdminRepositoryProtocol | None = None) -> None:
        self._repo: AdminRepositoryProtocol = repo or AdminRepository()

    async def find_admin(self, db: AsyncSession, caller_id: str) -> AdminEntry | None:
        admins = await self._repo.list_admins(db)
        if not admins:
            raise AdminConfigNotFoundError()
        return next((a for a in admins if a.user_id == caller_id), None)

    async def ensure_admin(self, db: AsyncSession, caller_id: str | None) -> AdminEntry:
        """Return the caller's allowlist entry or raise.

        Raises:
            UnauthenticatedError: no caller identity.
            AdminConfigNotFoundError: the allowlist is empty.
            PermissionDeniedError: caller is not on the allowlist.
        """
        if not caller_id:
            raise UnauthenticatedError()
        admin = await self.find_admin(db, caller_id)
        if admin is None:
            raise PermissionDeniedError()
        return admin

    async def is_admin(self, db: AsyncSession, caller_id: str) -> bool:
        try:
            return await self.find_admin(db, caller_id) is not None
        except AdminConfigNotFoundError:
            return False
