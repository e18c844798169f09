"""Repository Protocols for ledger entries and electric bills.

Unit tests inject in-memory fakes that conform to these Protocols.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_billing.domain.models import ElectricBill, LedgerEntry


class LedgerRepositoryProtocol(Protocol):
    async def exists(self, db: AsyncSession, member_id: str, billing_month: str) -> bool: ...

    async def get(
        self, db: AsyncSession, member_id: str, billing_month: str
    ) -> LedgerEntry | None: ...

    async def insert(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry | None:
        """Create the entry unless (member, month) exists; None means it already did."""
        ...

    async def save_payment(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry: ...

    async def mark_pending_reconciliation(
        self, db: AsyncSession, member_id: str, billing_month: str, pending: bool
    ) -> None: ...

    async def list_for_member(
        self, db: AsyncSession, member_id: str, before_month: str | None, limit: int
    ) -> list[LedgerEntry]: ...

    async def list_for_month(
        self, db: AsyncSession, billing_month: str
    ) -> list[tuple[LedgerEntry, str]]:
        """Entries of active members for the month, paired with the member name."""
        ...

    async def latest_per_member(self, db: AsyncSession) -> dict[str, LedgerEntry]: ...

    async def list_pending_reconciliation(self, db: AsyncSession) -> list[LedgerEntry]: ...


class ElectricBillRepositoryProtocol(Protocol):
    async def upsert(self, db: AsyncSession, bill: ElectricBill) -> ElectricBill: ...

    async def get_latest(self, db: AsyncSession) -> ElectricBill | None: ...
