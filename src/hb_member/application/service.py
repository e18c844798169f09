"""MemberService — admission, amendment, lookup and deactivation.

Each mutating method owns its transaction: the member write and the
active-member counter adjustment commit together or not at all.
"""

import logging
from dataclasses import replace
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_common.datetime_utils import add_years
from src.hb_common.errors import (
    DuplicateMemberError,
    MemberConflictError,
    MemberNotActiveError,
    MemberNotFoundError,
    ValidationError,
)
from src.hb_member.application.schemas import AddMemberRequest, UpdateMemberRequest
from src.hb_member.domain.models import Member, Settlement
from src.hb_member.domain.repository import MemberRepositoryProtocol
from src.hb_member.domain.settlement import compute_settlement
from src.hb_member.infrastructure.persistence import MemberRepository
from src.hb_settings.application.service import SettingsService

logger = logging.getLogger(__name__)

# Deactivated records are retained for one year after the leave date.
_RETENTION_YEARS = 1


class MemberService:
    def __init__(
        self,
        repo: MemberRepositoryProtocol | None = None,
        settings_service: SettingsService | None = None,
    ) -> None:
        self._repo: MemberRepositoryProtocol = repo or MemberRepository()
        self._settings = settings_service or SettingsService()

    async def get_member(self, db: AsyncSession, member_id: str) -> Member:
        member = await self._repo.get(db, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    async def find_member_for_user(self, db: AsyncSession, user_id: str) -> Member | None:
        return await self._repo.find_by_user_id(db, user_id)

    async def list_members(
        self,
        db: AsyncSession,
        include_inactive: bool = False,
        floor: str | None = None,
        search: str | None = None,
    ) -> list[Member]:
        return await self._repo.list_members(
            db, include_inactive=include_inactive, floor=floor, search=search
        )

    async def add_member(self, db: AsyncSession, body: AddMemberRequest) -> Member:
        if await self._repo.find_by_phone(db, body.phone) is not None:
            raise DuplicateMemberError(body.phone)

        global_settings = await self._settings.load(db)
        floor, bed_type = body.floor.value, body.bed_type.value
        rent = body.rent if body.rent is not None else global_settings.rent_for(floor, bed_type)
        if rent is None:
            raise ValidationError(f"no rent configured for {floor}/{bed_type}; pass rent explicitly")
        security_deposit = (
            body.security_deposit
            if body.security_deposit is not None
            else global_settings.default_security_deposit
        )

        draft = Member(
            id="",
            name=body.name,
            phone=body.phone,
            floor=floor,
            bed_type=bed_type,
            move_in_date=body.move_in_date,
            security_deposit=security_deposit,
            rent_at_joining=rent,
            advance_deposit=body.advance_deposit,
            current_rent=rent,
            total_agreed_deposit=security_deposit + body.advance_deposit + rent,
            outstanding_balance=body.outstanding_amount,
            is_active=True,
            opted_for_wifi=body.opted_for_wifi,
            version=0,
            user_id=body.user_id,
            note=body.note,
        )
        try:
            member = await self._repo.insert(db, draft)
            await self._settings.adjust_active_counts(
                db, lambda c: c.with_member_added(floor, body.opted_for_wifi)
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateMemberError(body.phone) from None
        except Exception:
            await db.rollback()
            raise
        logger.info("Member %s admitted (%s/%s)", member.id, floor, bed_type)
        return member

    async def update_member(
        self, db: AsyncSession, member_id: str, body: UpdateMemberRequest
    ) -> Member:
        """Amend rent/room/WiFi/note of an active member. Never touches balances."""
        member = await self.get_member(db, member_id)
        if not member.is_active:
            raise MemberNotActiveError(member_id)

        changes = body.model_dump(exclude_unset=True)
        for key in ("floor", "bed_type"):
            if changes.get(key) is not None:
                changes[key] = changes[key].value
        changes = {
            k: v for k, v in changes.items() if v is not None or k in ("note", "user_id")
        }
        updated = replace(member, **changes)

        try:
            saved = await self._repo.update_profile(db, updated, member.version)
            if saved is None:
                raise MemberConflictError(member_id)
            if (member.floor, member.opted_for_wifi) != (saved.floor, saved.opted_for_wifi):
                await self._settings.adjust_active_counts(
                    db,
                    lambda c: c.with_member_moved(
                        member.floor, member.opted_for_wifi, saved.floor, saved.opted_for_wifi
                    ),
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Member %s updated: %s", member_id, sorted(changes))
        return saved

    async def preview_settlement(
        self, db: AsyncSession, member_id: str, leave_date: date
    ) -> Settlement:
        """Read-only settlement for a prospective leave date."""
        member = await self.get_member(db, member_id)
        return compute_settlement(member, leave_date)

    async def deactivate_member(
        self, db: AsyncSession, member_id: str, leave_date: date
    ) -> tuple[Member, Settlement]:
        """Mark the member inactive and return the settlement to be paid out-of-band.

        outstanding_balance is left untouched.
        """
        member = await self.get_member(db, member_id)
        if not member.is_active:
            raise MemberNotActiveError(member_id)
        if leave_date < member.move_in_date:
            raise ValidationError("leave_date is before move_in_date")

        settlement = compute_settlement(member, leave_date)
        try:
            saved = await self._repo.deactivate(
                db, member_id, member.version, leave_date, add_years(leave_date, _RETENTION_YEARS)
            )
            if saved is None:
                raise MemberConflictError(member_id)
            await self._settings.adjust_active_counts(
                db, lambda c: c.with_member_removed(member.floor, member.opted_for_wifi)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Member %s deactivated on %s: %s %d",
            member_id,
            leave_date.isoformat(),
            settlement.status,
            settlement.refund_amount,
        )
        return saved, settlement
