"""Pydantic schemas for hb_member API. All amounts are integer paise."""

from datetime import date

from pydantic import BaseModel, Field

from src.hb_common.enums import BedType, Floor
from src.hb_common.ids import UuidStr
from src.hb_common.money import paise_to_display
from src.hb_member.domain.models import Member, Settlement


class AddMemberRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., pattern=r"^\+?\d{10,15}$")
    floor: Floor
    bed_type: BedType
    move_in_date: date
    rent: int | None = Field(None, ge=0, description="Defaults to the bed-rent table entry")
    security_deposit: int | None = Field(None, ge=0, description="Defaults to the global default")
    advance_deposit: int = Field(0, ge=0)
    opted_for_wifi: bool = False
    outstanding_amount: int = Field(0, description="Opening balance; negative = credit")
    note: str | None = Field(None, max_length=500)
    user_id: UuidStr | None = None


class UpdateMemberRequest(BaseModel):
    current_rent: int | None = Field(None, ge=0)
    floor: Floor | None = None
    bed_type: BedType | None = None
    opted_for_wifi: bool | None = None
    note: str | None = Field(None, max_length=500)
    user_id: UuidStr | None = None


class DeactivateMemberRequest(BaseModel):
    leave_date: date


class MemberResponse(BaseModel):
    id: str
    name: str
    phone: str
    floor: str
    bed_type: str
    move_in_date: str
    security_deposit: int
    rent_at_joining: int
    advance_deposit: int
    current_rent: int
    total_agreed_deposit: int
    outstanding_balance: int
    outstanding_balance_display: str
    is_active: bool
    opted_for_wifi: bool
    user_id: str | None
    leave_date: str | None
    note: str | None
    version: int

    @classmethod
    def from_domain(cls, m: Member) -> "MemberResponse":
        return cls(
            id=m.id,
            name=m.name,
            phone=m.phone,
            floor=m.floor,
            bed_type=m.bed_type,
            move_in_date=m.move_in_date.isoformat(),
            security_deposit=m.security_deposit,
            rent_at_joining=m.rent_at_joining,
            advance_deposit=m.advance_deposit,
            current_rent=m.current_rent,
            total_agreed_deposit=m.total_agreed_deposit,
            outstanding_balance=m.outstanding_balance,
            outstanding_balance_display=paise_to_display(m.outstanding_balance),
            is_active=m.is_active,
            opted_for_wifi=m.opted_for_wifi,
            user_id=m.user_id,
            leave_date=m.leave_date.isoformat() if m.leave_date else None,
            note=m.note,
            version=m.version,
        )


class MemberListResponse(BaseModel):
    members: list[MemberResponse]
    total: int


class SettlementResponse(BaseModel):
    member_id: str
    member_name: str
    total_agreed_deposit: int
    outstanding_balance: int
    refund_amount: int
    refund_amount_display: str
    status: str
    leave_date: str

    @classmethod
    def from_domain(cls, s: Settlement) -> "SettlementResponse":
        return cls(
            member_id=s.member_id,
            member_name=s.member_name,
            total_agreed_deposit=s.total_agreed_deposit,
            outstanding_balance=s.outstanding_balance,
            refund_amount=s.refund_amount,
            refund_amount_display=paise_to_display(s.refund_amount),
            status=s.status,
            leave_date=s.leave_date.isoformat(),
        )
