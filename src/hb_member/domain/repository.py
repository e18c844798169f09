"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.

Every write that touches a member row is a compare-and-swap on ``version``:
it returns the updated Member, or None when the row moved on (or is gone).
"""

from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_member.domain.models import Member


class MemberRepositoryProtocol(Protocol):
    async def get(self, db: AsyncSession, member_id: str) -> Member | None: ...

    async def find_by_phone(self, db: AsyncSession, phone: str) -> Member | None: ...

    async def find_by_user_id(self, db: AsyncSession, user_id: str) -> Member | None: ...

    async def list_members(
        self,
        db: AsyncSession,
        include_inactive: bool = False,
        floor: str | None = None,
        search: str | None = None,
    ) -> list[Member]: ...

    async def list_active(self, db: AsyncSession) -> list[Member]: ...

    async def insert(self, db: AsyncSession, member: Member) -> Member: ...

    async def update_profile(
        self, db: AsyncSession, member: Member, expected_version: int
    ) -> Member | None: ...

    async def compare_and_set_balance(
        self, db: AsyncSession, member_id: str, expected_version: int, new_balance: int
    ) -> Member | None: ...

    async def deactivate(
        self,
        db: AsyncSession,
        member_id: str,
        expected_version: int,
        leave_date: date,
        ttl_expiry: date,
    ) -> Member | None: ...
