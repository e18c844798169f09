"""MemberRepository — concrete implementation of MemberRepositoryProtocol.

Raw SQL over the ``members`` table. Every UPDATE is guarded by
``version = :expected_version`` and bumps the version; an empty RETURNING
means a concurrent writer won.

Transaction ownership: the CALLER commits or rolls back.
"""

from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_member.domain.models import Member

_MEMBER_COLUMNS = """
    id, name, phone, floor, bed_type, move_in_date,
    security_deposit, rent_at_joining, advance_deposit, current_rent,
    total_agreed_deposit, outstanding_balance, is_active, opted_for_wifi,
    version, user_id, leave_date, ttl_expiry, note, created_at, updated_at
"""

_GET_MEMBER_SQL = text(f"SELECT {_MEMBER_COLUMNS} FROM members WHERE id = :id")

_GET_BY_PHONE_SQL = text(f"SELECT {_MEMBER_COLUMNS} FROM members WHERE phone = :phone")

_GET_BY_USER_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS} FROM members
    WHERE user_id = :user_id
    ORDER BY is_active DESC, created_at DESC
    LIMIT 1
""")

_LIST_ACTIVE_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS} FROM members
    WHERE is_active = TRUE
    ORDER BY floor, name, id
""")

_INSERT_MEMBER_SQL = text(f"""
    INSERT INTO members (
        name, phone, floor, bed_type, move_in_date,
        security_deposit, rent_at_joining, advance_deposit, current_rent,
        total_agreed_deposit, outstanding_balance, is_active, opted_for_wifi,
        version, user_id, note
    ) VALUES (
        :name, :phone, :floor, :bed_type, :move_in_date,
        :security_deposit, :rent_at_joining, :advance_deposit, :current_rent,
        :total_agreed_deposit, :outstanding_balance, TRUE, :opted_for_wifi,
        0, :user_id, :note
    )
    RETURNING {_MEMBER_COLUMNS}
""")

_UPDATE_PROFILE_SQL = text(f"""
    UPDATE members
    SET current_rent   = :current_rent,
        floor          = :floor,
        bed_type       = :bed_type,
        opted_for_wifi = :opted_for_wifi,
        note           = :note,
        user_id        = :user_id,
        version = version + 1
    WHERE id = :id AND version = :expected_version
    RETURNING {_MEMBER_COLUMNS}
""")

_CAS_BALANCE_SQL = text(f"""
    UPDATE members
    SET outstanding_balance = :new_balance,
        version = version + 1
    WHERE id = :id AND version = :expected_version
    RETURNING {_MEMBER_COLUMNS}
""")

_DEACTIVATE_SQL = text(f"""
    UPDATE members
    SET is_active  = FALSE,
        leave_date = :leave_date,
        ttl_expiry = :ttl_expiry,
        version = version + 1
    WHERE id = :id AND version = :expected_version AND is_active = TRUE
    RETURNING {_MEMBER_COLUMNS}
""")


def _row_to_member(row: object) -> Member:
    return Member(
        id=str(row.id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        phone=row.phone,  # type: ignore[attr-defined]
        floor=row.floor,  # type: ignore[attr-defined]
        bed_type=row.bed_type,  # type: ignore[attr-defined]
        move_in_date=row.move_in_date,  # type: ignore[attr-defined]
        security_deposit=row.security_deposit,  # type: ignore[attr-defined]
        rent_at_joining=row.rent_at_joining,  # type: ignore[attr-defined]
        advance_deposit=row.advance_deposit,  # type: ignore[attr-defined]
        current_rent=row.current_rent,  # type: ignore[attr-defined]
        total_agreed_deposit=row.total_agreed_deposit,  # type: ignore[attr-defined]
        outstanding_balance=row.outstanding_balance,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        opted_for_wifi=row.opted_for_wifi,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        user_id=str(row.user_id) if row.user_id else None,  # type: ignore[attr-defined]
        leave_date=row.leave_date,  # type: ignore[attr-defined]
        ttl_expiry=row.ttl_expiry,  # type: ignore[attr-defined]
        note=row.note,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class MemberRepository:
    async def get(self, db: AsyncSession, member_id: str) -> Member | None:
        row = (await db.execute(_GET_MEMBER_SQL, {"id": member_id})).fetchone()
        return _row_to_member(row) if row else None

    async def find_by_phone(self, db: AsyncSession, phone: str) -> Member | None:
        row = (await db.execute(_GET_BY_PHONE_SQL, {"phone": phone})).fetchone()
        return _row_to_member(row) if row else None

    async def find_by_user_id(self, db: AsyncSession, user_id: str) -> Member | None:
        row = (await db.execute(_GET_BY_USER_SQL, {"user_id": user_id})).fetchone()
        return _row_to_member(row) if row else None

    async def list_members(
        self,
        db: AsyncSession,
        include_inactive: bool = False,
        floor: str | None = None,
        search: str | None = None,
    ) -> list[Member]:
        clauses: list[str] = []
        params: dict[str, object] = {}
        if not include_inactive:
            clauses.append("is_active = TRUE")
        if floor:
            clauses.append("floor = :floor")
            params["floor"] = floor
        if search:
            clauses.append("(name ILIKE :pattern OR phone LIKE :pattern)")
            params["pattern"] = f"%{search}%"
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        sql = text(f"SELECT {_MEMBER_COLUMNS} FROM members {where} ORDER BY name, id")
        rows = (await db.execute(sql, params)).fetchall()
        return [_row_to_member(r) for r in rows]

    async def list_active(self, db: AsyncSession) -> list[Member]:
        rows = (await db.execute(_LIST_ACTIVE_SQL)).fetchall()
        return [_row_to_member(r) for r in rows]

    async def insert(self, db: AsyncSession, member: Member) -> Member:
        row = (
            await db.execute(
                _INSERT_MEMBER_SQL,
                {
                    "name": member.name,
                    "phone": member.phone,
                    "floor": member.floor,
                    "bed_type": member.bed_type,
                    "move_in_date": member.move_in_date,
                    "security_deposit": member.security_deposit,
                    "rent_at_joining": member.rent_at_joining,
                    "advance_deposit": member.advance_deposit,
                    "current_rent": member.current_rent,
                    "total_agreed_deposit": member.total_agreed_deposit,
                    "outstanding_balance": member.outstanding_balance,
                    "opted_for_wifi": member.opted_for_wifi,
                    "user_id": member.user_id,
                    "note": member.note,
                },
            )
        ).fetchone()
        return _row_to_member(row)

    async def update_profile(
        self, db: AsyncSession, member: Member, expected_version: int
    ) -> Member | None:
        row = (
            await db.execute(
                _UPDATE_PROFILE_SQL,
                {
                    "id": member.id,
                    "current_rent": member.current_rent,
                    "floor": member.floor,
                    "bed_type": member.bed_type,
                    "opted_for_wifi": member.opted_for_wifi,
                    "note": member.note,
                    "user_id": member.user_id,
                    "expected_version": expected_version,
                },
            )
        ).fetchone()
        return _row_to_member(row) if row else None

    async def compare_and_set_balance(
        self, db: AsyncSession, member_id: str, expected_version: int, new_balance: int
    ) -> Member | None:
        row = (
            await db.execute(
                _CAS_BALANCE_SQL,
                {"id": member_id, "expected_version": expected_version, "new_balance": new_balance},
            )
        ).fetchone()
        return _row_to_member(row) if row else None

    async def deactivate(
        self,
        db: AsyncSession,
        member_id: str,
        expected_version: int,
        leave_date: date,
        ttl_expiry: date,
    ) -> Member | None:
        row = (
            await db.execute(
                _DEACTIVATE_SQL,
                {
                    "id": member_id,
                    "expected_version": expected_version,
                    "leave_date": leave_date,
                    "ttl_expiry": ttl_expiry,
                },
            )
        ).fetchone()
        return _row_to_member(row) if row else None
