"""In-memory repositories that honour the same contracts as the SQL ones.

Compare-and-swap writes check ``version`` exactly like the UPDATE ... WHERE
version = :expected statements; ledger inserts behave like ON CONFLICT DO
NOTHING. Failure hooks let tests force a specific member to blow up.
"""

from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock

from src.hb_billing.domain.models import ElectricBill, LedgerEntry
from src.hb_member.domain.models import Member
from src.hb_settings.domain.models import ActiveMemberCounts, GlobalSettings

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


def make_db() -> AsyncMock:
    """Session stand-in: commit/rollback are recorded, nothing else is used."""
    return AsyncMock()


def make_member(
    member_id: str = "m-1",
    name: str = "Asha",
    floor: str = "2nd",
    current_rent: int = 200000,
    outstanding_balance: int = 0,
    opted_for_wifi: bool = False,
    is_active: bool = True,
    total_agreed_deposit: int = 500000,
    user_id: str | None = None,
) -> Member:
    return Member(
        id=member_id,
        name=name,
        phone="98" + "".join(c for c in member_id if c.isdigit()).rjust(8, "0"),
        floor=floor,
        bed_type="Bed",
        move_in_date=date(2025, 6, 1),
        security_deposit=200000,
        rent_at_joining=current_rent,
        advance_deposit=total_agreed_deposit - 200000 - current_rent,
        current_rent=current_rent,
        total_agreed_deposit=total_agreed_deposit,
        outstanding_balance=outstanding_balance,
        is_active=is_active,
        opted_for_wifi=opted_for_wifi,
        version=0,
        user_id=user_id,
    )


def make_settings(
    current_billing_month: str | None = "2026-02",
    wifi_monthly_charge: int = 30000,
    version: int = 4,
) -> GlobalSettings:
    return GlobalSettings(
        bed_rents={"2nd": {"Bed": 160000, "Room": 320000}, "3rd": {"Bed": 150000}},
        default_security_deposit=100000,
        wifi_monthly_charge=wifi_monthly_charge,
        current_billing_month=current_billing_month,
        next_billing_month="2026-03" if current_billing_month == "2026-02" else None,
        active_member_counts=ActiveMemberCounts(total=0, by_floor={}, wifi_opted_in=0),
        version=version,
    )


class FakeMemberRepository:
    def __init__(self, members: list[Member] | None = None) -> None:
        self.members: dict[str, Member] = {m.id: m for m in members or []}
        self.fail_balance_for: set[str] = set()
        self.conflict_balance_for: dict[str, int] = {}  # member_id -> conflicts left

    async def get(self, db, member_id):  # type: ignore[no-untyped-def]
        m = self.members.get(member_id)
        return replace(m) if m else None

    async def find_by_phone(self, db, phone):  # type: ignore[no-untyped-def]
        return next((replace(m) for m in self.members.values() if m.phone == phone), None)

    async def find_by_user_id(self, db, user_id):  # type: ignore[no-untyped-def]
        return next((replace(m) for m in self.members.values() if m.user_id == user_id), None)

    async def list_members(self, db, include_inactive=False, floor=None, search=None):  # type: ignore[no-untyped-def]
        out = [
            replace(m)
            for m in self.members.values()
            if (include_inactive or m.is_active)
            and (floor is None or m.floor == floor)
            and (search is None or search.lower() in m.name.lower() or search in m.phone)
        ]
        return sorted(out, key=lambda m: (m.name, m.id))

    async def list_active(self, db):  # type: ignore[no-untyped-def]
        return [replace(m) for m in self.members.values() if m.is_active]

    async def insert(self, db, member):  # type: ignore[no-untyped-def]
        saved = replace(member, id=f"m-{len(self.members) + 1}", version=0)
        self.members[saved.id] = saved
        return replace(saved)

    async def update_profile(self, db, member, expected_version):  # type: ignore[no-untyped-def]
        current = self.members.get(member.id)
        if current is None or current.version != expected_version:
            return None
        saved = replace(
            current,
            current_rent=member.current_rent,
            floor=member.floor,
            bed_type=member.bed_type,
            opted_for_wifi=member.opted_for_wifi,
            note=member.note,
            user_id=member.user_id,
            version=current.version + 1,
        )
        self.members[member.id] = saved
        return replace(saved)

    async def compare_and_set_balance(self, db, member_id, expected_version, new_balance):  # type: ignore[no-untyped-def]
        if member_id in self.fail_balance_for:
            raise RuntimeError("balance store unavailable")
        current = self.members.get(member_id)
        if current is None:
            return None
        if self.conflict_balance_for.get(member_id, 0) > 0:
            # Simulate a concurrent writer bumping the version first
            self.conflict_balance_for[member_id] -= 1
            self.members[member_id] = replace(current, version=current.version + 1)
            return None
        if current.version != expected_version:
            return None
        saved = replace(current, outstanding_balance=new_balance, version=current.version + 1)
        self.members[member_id] = saved
        return replace(saved)

    async def deactivate(self, db, member_id, expected_version, leave_date, ttl_expiry):  # type: ignore[no-untyped-def]
        current = self.members.get(member_id)
        if current is None or current.version != expected_version or not current.is_active:
            return None
        saved = replace(
            current,
            is_active=False,
            leave_date=leave_date,
            ttl_expiry=ttl_expiry,
            version=current.version + 1,
        )
        self.members[member_id] = saved
        return replace(saved)


class FakeLedgerRepository:
    def __init__(self, names: dict[str, str] | None = None) -> None:
        self.entries: dict[tuple[str, str], LedgerEntry] = {}
        self.fail_insert_for: set[str] = set()
        self.fail_mark_pending = False
        self.names = names or {}
        self._clock = 0

    def _tick(self) -> datetime:
        self._clock += 1
        return _T0 + timedelta(seconds=self._clock)

    async def exists(self, db, member_id, billing_month):  # type: ignore[no-untyped-def]
        return (member_id, billing_month) in self.entries

    async def get(self, db, member_id, billing_month):  # type: ignore[no-untyped-def]
        e = self.entries.get((member_id, billing_month))
        return replace(e) if e else None

    async def insert(self, db, entry):  # type: ignore[no-untyped-def]
        if entry.member_id in self.fail_insert_for:
            raise RuntimeError("ledger store unavailable")
        key = (entry.member_id, entry.billing_month)
        if key in self.entries:
            return None
        saved = replace(entry, updated_at=self._tick())
        self.entries[key] = saved
        return replace(saved)

    async def save_payment(self, db, entry):  # type: ignore[no-untyped-def]
        key = (entry.member_id, entry.billing_month)
        saved = replace(
            self.entries[key],
            amount_paid=entry.amount_paid,
            current_outstanding=entry.current_outstanding,
            status=entry.status,
            note=entry.note,
            last_payment_at=entry.last_payment_at,
            updated_at=self._tick(),
        )
        self.entries[key] = saved
        return replace(saved)

    async def mark_pending_reconciliation(self, db, member_id, billing_month, pending):  # type: ignore[no-untyped-def]
        if self.fail_mark_pending:
            raise RuntimeError("ledger store unavailable")
        key = (member_id, billing_month)
        self.entries[key] = replace(self.entries[key], pending_reconciliation=pending)

    async def list_for_member(self, db, member_id, before_month, limit):  # type: ignore[no-untyped-def]
        rows = sorted(
            (
                e
                for (mid, month), e in self.entries.items()
                if mid == member_id and (before_month is None or month < before_month)
            ),
            key=lambda e: e.billing_month,
            reverse=True,
        )
        return [replace(e) for e in rows[:limit]]

    async def list_for_month(self, db, billing_month):  # type: ignore[no-untyped-def]
        return [
            (replace(e), self.names.get(e.member_id, e.member_id))
            for (_, month), e in sorted(self.entries.items())
            if month == billing_month
        ]

    async def latest_per_member(self, db):  # type: ignore[no-untyped-def]
        latest: dict[str, LedgerEntry] = {}
        for e in self.entries.values():
            held = latest.get(e.member_id)
            if held is None or (e.updated_at, e.billing_month) > (held.updated_at, held.billing_month):
                latest[e.member_id] = e
        return {k: replace(v) for k, v in latest.items()}

    async def list_pending_reconciliation(self, db):  # type: ignore[no-untyped-def]
        return [replace(e) for e in self.entries.values() if e.pending_reconciliation]


class FakeElectricBillRepository:
    def __init__(self) -> None:
        self.bills: dict[str, ElectricBill] = {}
        self.fail = False

    async def upsert(self, db, bill):  # type: ignore[no-untyped-def]
        if self.fail:
            raise RuntimeError("electric bill store unavailable")
        previous = self.bills.get(bill.billing_month)
        saved = replace(
            bill,
            generated_at=previous.generated_at if previous else _T0,
            last_updated=_T0,
        )
        self.bills[bill.billing_month] = saved
        return saved

    async def get_latest(self, db):  # type: ignore[no-untyped-def]
        if not self.bills:
            return None
        return self.bills[max(self.bills)]


class FakeSettingsRepository:
    def __init__(self, settings: GlobalSettings | None = None) -> None:
        self.settings = settings
        self.conflicts_left = 0

    async def get_settings(self, db):  # type: ignore[no-untyped-def]
        return self.settings

    async def save_settings(self, db, settings, expected_version):  # type: ignore[no-untyped-def]
        if self.settings is None:
            return None
        if self.conflicts_left > 0:
            self.conflicts_left -= 1
            self.settings = replace(self.settings, version=self.settings.version + 1)
            return None
        if self.settings.version != expected_version:
            return None
        self.settings = replace(settings, version=expected_version + 1)
        return self.settings
