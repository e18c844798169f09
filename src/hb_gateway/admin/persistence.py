"""AdminRepository — raw SQL over the ``admins`` table."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_gateway.admin.models import AdminEntry

_LIST_ADMINS_SQL = text("""
    SELECT user_id, email, role, added_at, added_by
    FROM admins
    ORDER BY added_at, user_id
""")

_INSERT_ADMIN_SQL = text("""
    INSERT INTO admins (user_id, email, role, added_by)
    VALUES (:user_id, :email, :role, :added_by)
    ON CONFLICT (user_id) DO NOTHING
    RETURNING user_id, email, role, added_at, added_by
""")

_DELETE_ADMIN_SQL = text("""
    DELETE FROM admins WHERE user_id = :user_id
    RETURNING user_id
""")


def _row_to_admin(row: object) -> AdminEntry:
    return AdminEntry(
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        role=row.role,  # type: ignore[attr-defined]
        added_at=row.added_at,  # type: ignore[attr-defined]
        added_by=row.added_by,  # type: ignore[attr-defined]
    )


class AdminRepository:
    async def list_admins(self, db: AsyncSession) -> list[AdminEntry]:
        rows = (await db.execute(_LIST_ADMINS_SQL)).fetchall()
        return [_row_to_admin(r) for r in rows]

    async def add_admin(self, db: AsyncSession, entry: AdminEntry) -> AdminEntry | None:
        result = await db.execute(
            _INSERT_ADMIN_SQL,
            {
                "user_id": entry.user_id,
                "email": entry.email,
                "role": entry.role,
                "added_by": entry.added_by,
            },
        )
        row = result.fetchone()
        return _row_to_admin(row) if row else None

    async def remove_admin(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(_DELETE_ADMIN_SQL, {"user_id": user_id})
        return result.fetchone() is not None
