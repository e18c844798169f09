"""AdminService — manage the admin allowlist.

Only the gate reads the allowlist on the hot path; this service owns writes.
At most one primary admin exists and it cannot be removed.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.hb_common.enums import AdminRole
from src.hb_common.errors import (
    AdminExistsError,
    AdminLimitReachedError,
    AdminNotFoundError,
    PrimaryAdminRemovalError,
    UserNotFoundError,
    ValidationError,
)
from src.hb_gateway.admin.models import AdminEntry
from src.hb_gateway.admin.persistence import AdminRepository
from src.hb_gateway.admin.repository import AdminRepositoryProtocol
from src.hb_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, repo: AdminRepositoryProtocol | None = None) -> None:
        self._repo: AdminRepositoryProtocol = repo or AdminRepository()

    async def list_admins(self, db: AsyncSession) -> list[AdminEntry]:
        return await self._repo.list_admins(db)

    async def add_admin(
        self, db: AsyncSession, user_id: str, role: AdminRole, added_by: str
    ) -> AdminEntry:
        admins = await self._repo.list_admins(db)
        if any(a.user_id == user_id for a in admins):
            raise AdminExistsError(user_id)
        if len(admins) >= settings.MAX_ADMINS:
            raise AdminLimitReachedError(settings.MAX_ADMINS)
        if role == AdminRole.PRIMARY and any(a.role == AdminRole.PRIMARY for a in admins):
            raise ValidationError("a primary admin already exists")

        user = (
            await db.execute(select(UserModel).where(UserModel.id == user_id))
        ).scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(user_id)

        try:
            entry = await self._repo.add_admin(
                db,
                AdminEntry(user_id=user_id, email=user.email, role=role.value, added_by=added_by),
            )
            if entry is None:
                raise AdminExistsError(user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin %s added by %s (role=%s)", user_id, added_by, role.value)
        return entry

    async def remove_admin(self, db: AsyncSession, user_id: str, removed_by: str) -> None:
        admins = await self._repo.list_admins(db)
        target = next((a for a in admins if a.user_id == user_id), None)
        if target is None:
            raise AdminNotFoundError(user_id)
        if target.role == AdminRole.PRIMARY:
            raise PrimaryAdminRemovalError()
        try:
            await self._repo.remove_admin(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin %s removed by %s", user_id, removed_by)
