"""Ledger and electric-bill repositories — raw SQL.

ledger_entries is keyed by (member_id, billing_month); creation goes through
ON CONFLICT DO NOTHING so a second generation for the same period writes
nothing. electric_bills is keyed by billing_month and upserted.

Transaction ownership: the CALLER commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_billing.domain.models import (
    BulkExpense,
    ElectricBill,
    Expense,
    FloorCost,
    LedgerEntry,
)
from src.hb_common.jsonb import dump_json, load_json

_LEDGER_COLUMNS = """
    member_id, billing_month, rent, electricity, wifi, previous_outstanding,
    expenses, total_charges, amount_paid, current_outstanding, status, note,
    pending_reconciliation, generated_at, last_payment_at, updated_at
"""

_LEDGER_COLUMNS_QUALIFIED = ", ".join(
    f"le.{c.strip()}" for c in _LEDGER_COLUMNS.split(",")
)

_EXISTS_SQL = text("""
    SELECT 1 FROM ledger_entries
    WHERE member_id = :member_id AND billing_month = :billing_month
""")

_GET_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS} FROM ledger_entries
    WHERE member_id = :member_id AND billing_month = :billing_month
""")

_INSERT_SQL = text(f"""
    INSERT INTO ledger_entries (
        member_id, billing_month, rent, electricity, wifi, previous_outstanding,
        expenses, total_charges, amount_paid, current_outstanding, status, note
    ) VALUES (
        :member_id, :billing_month, :rent, :electricity, :wifi, :previous_outstanding,
        CAST(:expenses AS JSONB), :total_charges, :amount_paid, :current_outstanding, :status, :note
    )
    ON CONFLICT (member_id, billing_month) DO NOTHING
    RETURNING {_LEDGER_COLUMNS}
""")

_SAVE_PAYMENT_SQL = text(f"""
    UPDATE ledger_entries
    SET amount_paid         = :amount_paid,
        current_outstanding = :current_outstanding,
        status              = :status,
        note                = :note,
        last_payment_at     = :last_payment_at
    WHERE member_id = :member_id AND billing_month = :billing_month
    RETURNING {_LEDGER_COLUMNS}
""")

_MARK_PENDING_SQL = text("""
    UPDATE ledger_entries
    SET pending_reconciliation = :pending
    WHERE member_id = :member_id AND billing_month = :billing_month
""")

_LIST_FOR_MEMBER_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS} FROM ledger_entries
    WHERE member_id = :member_id
      AND (CAST(:before_month AS VARCHAR) IS NULL OR billing_month < :before_month)
    ORDER BY billing_month DESC
    LIMIT :limit
""")

_LIST_FOR_MONTH_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS_QUALIFIED}, m.name AS member_name
    FROM ledger_entries le
    JOIN members m ON m.id = le.member_id
    WHERE le.billing_month = :billing_month AND m.is_active = TRUE
    ORDER BY m.name, le.member_id
""")

# Most recently written entry per member; ties broken by the later period.
_LATEST_PER_MEMBER_SQL = text(f"""
    SELECT DISTINCT ON (member_id) {_LEDGER_COLUMNS}
    FROM ledger_entries
    ORDER BY member_id, updated_at DESC, billing_month DESC
""")

_LIST_PENDING_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS} FROM ledger_entries
    WHERE pending_reconciliation = TRUE
    ORDER BY billing_month, member_id
""")

_ELECTRIC_BILL_COLUMNS = "billing_month, floor_costs, bulk_expenses, generated_at, last_updated"

_UPSERT_ELECTRIC_BILL_SQL = text(f"""
    INSERT INTO electric_bills (billing_month, floor_costs, bulk_expenses)
    VALUES (:billing_month, CAST(:floor_costs AS JSONB), CAST(:bulk_expenses AS JSONB))
    ON CONFLICT (billing_month) DO UPDATE
    SET floor_costs   = EXCLUDED.floor_costs,
        bulk_expenses = EXCLUDED.bulk_expenses,
        last_updated  = NOW()
    RETURNING {_ELECTRIC_BILL_COLUMNS}
""")

_LATEST_ELECTRIC_BILL_SQL = text(f"""
    SELECT {_ELECTRIC_BILL_COLUMNS} FROM electric_bills
    ORDER BY billing_month DESC
    LIMIT 1
""")


def _row_to_entry(row: object) -> LedgerEntry:
    expenses = load_json(row.expenses) or []  # type: ignore[attr-defined]
    return LedgerEntry(
        member_id=str(row.member_id),  # type: ignore[attr-defined]
        billing_month=row.billing_month,  # type: ignore[attr-defined]
        rent=row.rent,  # type: ignore[attr-defined]
        electricity=row.electricity,  # type: ignore[attr-defined]
        wifi=row.wifi,  # type: ignore[attr-defined]
        previous_outstanding=row.previous_outstanding,  # type: ignore[attr-defined]
        expenses=[Expense(description=e["description"], amount=int(e["amount"])) for e in expenses],
        total_charges=row.total_charges,  # type: ignore[attr-defined]
        amount_paid=row.amount_paid,  # type: ignore[attr-defined]
        current_outstanding=row.current_outstanding,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        note=row.note,  # type: ignore[attr-defined]
        pending_reconciliation=row.pending_reconciliation,  # type: ignore[attr-defined]
        generated_at=row.generated_at,  # type: ignore[attr-defined]
        last_payment_at=row.last_payment_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_bill(row: object) -> ElectricBill:
    floor_costs = load_json(row.floor_costs) or {}  # type: ignore[attr-defined]
    bulk = load_json(row.bulk_expenses) or []  # type: ignore[attr-defined]
    return ElectricBill(
        billing_month=row.billing_month,  # type: ignore[attr-defined]
        floor_costs={
            floor: FloorCost(bill=int(c["bill"]), total_members=int(c["total_members"]))
            for floor, c in floor_costs.items()
        },
        bulk_expenses=[
            BulkExpense(
                member_ids=tuple(b["member_ids"]),
                amount=int(b["amount"]),
                description=b["description"],
            )
            for b in bulk
        ],
        generated_at=row.generated_at,  # type: ignore[attr-defined]
        last_updated=row.last_updated,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    async def exists(self, db: AsyncSession, member_id: str, billing_month: str) -> bool:
        result = await db.execute(
            _EXISTS_SQL, {"member_id": member_id, "billing_month": billing_month}
        )
        return result.fetchone() is not None

    async def get(
        self, db: AsyncSession, member_id: str, billing_month: str
    ) -> LedgerEntry | None:
        row = (
            await db.execute(_GET_SQL, {"member_id": member_id, "billing_month": billing_month})
        ).fetchone()
        return _row_to_entry(row) if row else None

    async def insert(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry | None:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "member_id": entry.member_id,
                    "billing_month": entry.billing_month,
                    "rent": entry.rent,
                    "electricity": entry.electricity,
                    "wifi": entry.wifi,
                    "previous_outstanding": entry.previous_outstanding,
                    "expenses": dump_json(
                        [{"description": e.description, "amount": e.amount} for e in entry.expenses]
                    ),
                    "total_charges": entry.total_charges,
                    "amount_paid": entry.amount_paid,
                    "current_outstanding": entry.current_outstanding,
                    "status": entry.status,
                    "note": entry.note,
                },
            )
        ).fetchone()
        return _row_to_entry(row) if row else None

    async def save_payment(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry:
        row = (
            await db.execute(
                _SAVE_PAYMENT_SQL,
                {
                    "member_id": entry.member_id,
                    "billing_month": entry.billing_month,
                    "amount_paid": entry.amount_paid,
                    "current_outstanding": entry.current_outstanding,
                    "status": entry.status,
                    "note": entry.note,
                    "last_payment_at": entry.last_payment_at,
                },
            )
        ).fetchone()
        return _row_to_entry(row)

    async def mark_pending_reconciliation(
        self, db: AsyncSession, member_id: str, billing_month: str, pending: bool
    ) -> None:
        await db.execute(
            _MARK_PENDING_SQL,
            {"member_id": member_id, "billing_month": billing_month, "pending": pending},
        )

    async def list_for_member(
        self, db: AsyncSession, member_id: str, before_month: str | None, limit: int
    ) -> list[LedgerEntry]:
        rows = (
            await db.execute(
                _LIST_FOR_MEMBER_SQL,
                {"member_id": member_id, "before_month": before_month, "limit": limit},
            )
        ).fetchall()
        return [_row_to_entry(r) for r in rows]

    async def list_for_month(
        self, db: AsyncSession, billing_month: str
    ) -> list[tuple[LedgerEntry, str]]:
        rows = (
            await db.execute(_LIST_FOR_MONTH_SQL, {"billing_month": billing_month})
        ).fetchall()
        return [(_row_to_entry(r), r.member_name) for r in rows]

    async def latest_per_member(self, db: AsyncSession) -> dict[str, LedgerEntry]:
        rows = (await db.execute(_LATEST_PER_MEMBER_SQL)).fetchall()
        entries = [_row_to_entry(r) for r in rows]
        return {e.member_id: e for e in entries}

    async def list_pending_reconciliation(self, db: AsyncSession) -> list[LedgerEntry]:
        rows = (await db.execute(_LIST_PENDING_SQL)).fetchall()
        return [_row_to_entry(r) for r in rows]


class ElectricBillRepository:
    async def upsert(self, db: AsyncSession, bill: ElectricBill) -> ElectricBill:
        row = (
            await db.execute(
                _UPSERT_ELECTRIC_BILL_SQL,
                {
                    "billing_month": bill.billing_month,
                    "floor_costs": dump_json(
                        {
                            floor: {"bill": c.bill, "total_members": c.total_members}
                            for floor, c in bill.floor_costs.items()
                        }
                    ),
                    "bulk_expenses": dump_json(
                        [
                            {
                                "member_ids": list(b.member_ids),
                                "amount": b.amount,
                                "description": b.description,
                            }
                            for b in bill.bulk_expenses
                        ]
                    ),
                },
            )
        ).fetchone()
        return _row_to_bill(row)

    async def get_latest(self, db: AsyncSession) -> ElectricBill | None:
        row = (await db.execute(_LATEST_ELECTRIC_BILL_SQL)).fetchone()
        return _row_to_bill(row) if row else None
