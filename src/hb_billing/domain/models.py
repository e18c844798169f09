"""Domain models for hb_billing — pure dataclasses, no SQLAlchemy dependency.

All amounts are integer paise.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Expense:
    description: str
    amount: int


@dataclass(frozen=True)
class BulkExpense:
    """One expense charged verbatim to every listed member (no per-head split)."""

    member_ids: tuple[str, ...]
    amount: int
    description: str


@dataclass(frozen=True)
class WifiOverride:
    """Flat WiFi charge for the listed members, replacing the opt-in default."""

    member_ids: tuple[str, ...]
    amount: int


@dataclass(frozen=True)
class FloorCost:
    bill: int
    total_members: int


@dataclass(frozen=True)
class BillingRun:
    """Inputs of one bulk generation for a billing month."""

    billing_month: str
    floor_electricity: dict[str, int]
    floor_member_counts: dict[str, int]
    bulk_expenses: tuple[BulkExpense, ...] = ()
    wifi_override: WifiOverride | None = None


@dataclass
class LedgerEntry:
    member_id: str
    billing_month: str                  # YYYY-MM
    rent: int
    electricity: int
    wifi: int
    previous_outstanding: int           # member balance before this entry
    expenses: list[Expense]
    total_charges: int
    amount_paid: int
    current_outstanding: int            # previous_outstanding + total_charges - amount_paid
    status: str                         # PaymentStatus value
    note: str | None = None
    pending_reconciliation: bool = False
    generated_at: datetime | None = None
    last_payment_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ElectricBill:
    billing_month: str
    floor_costs: dict[str, FloorCost]
    bulk_expenses: list[BulkExpense] = field(default_factory=list)
    generated_at: datetime | None = None
    last_updated: datetime | None = None


@dataclass
class GenerationResult:
    generated_count: int = 0
    skipped_count: int = 0
    errors: list[str] = field(default_factory=list)
