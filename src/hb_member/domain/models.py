"""Domain models for hb_member — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class Member:
    id: str
    name: str
    phone: str
    floor: str                    # Floor value
    bed_type: str                 # BedType value
    move_in_date: date
    security_deposit: int         # paise, fixed at joining
    rent_at_joining: int          # paise, fixed at joining
    advance_deposit: int          # paise, fixed at joining
    current_rent: int             # paise
    total_agreed_deposit: int     # paise, set once at creation
    outstanding_balance: int      # paise, positive = owes, negative = in credit
    is_active: bool
    opted_for_wifi: bool
    version: int
    user_id: str | None = None
    leave_date: date | None = None
    ttl_expiry: date | None = None
    note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Settlement:
    member_id: str
    member_name: str
    total_agreed_deposit: int     # paise
    outstanding_balance: int      # paise
    refund_amount: int            # paise, positive = refund to member
    status: str                   # SettlementStatus value
    leave_date: date
