"""Pydantic schemas and cursor utilities for hb_billing API. Amounts are paise."""

import base64
import json

from pydantic import BaseModel, Field, field_validator

from src.hb_billing.domain.models import (
    BillingRun,
    BulkExpense,
    ElectricBill,
    GenerationResult,
    LedgerEntry,
    WifiOverride,
)
from src.hb_common.datetime_utils import is_billing_month
from src.hb_common.enums import Floor
from src.hb_common.ids import UuidStr
from src.hb_common.money import paise_to_display

_BILLING_MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
_FLOORS = {f.value for f in Floor}

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(billing_month: str) -> str:
    """Encode the last billing month of a page into an opaque Base64 cursor."""
    payload = json.dumps({"m": billing_month})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> str | None:
    """Decode a cursor back to a billing month. Returns None when malformed."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        month = str(payload["m"])
    except (ValueError, KeyError, TypeError):
        return None
    return month if is_billing_month(month) else None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


def _check_floor_keys(v: dict[str, int]) -> dict[str, int]:
    unknown = set(v) - _FLOORS
    if unknown:
        raise ValueError(f"Unknown floor(s): {sorted(unknown)}")
    if any(amount < 0 for amount in v.values()):
        raise ValueError("Floor values must be >= 0")
    return v


class BulkExpenseRequest(BaseModel):
    member_ids: list[str] = Field(..., min_length=1)
    amount: int = Field(..., ge=0, description="Charged in full to every listed member")
    description: str = Field(..., min_length=1, max_length=200)


class WifiOverrideRequest(BaseModel):
    member_ids: list[str] = Field(..., min_length=1)
    amount: int = Field(..., ge=0)


class GenerateBillsRequest(BaseModel):
    billing_month: str = Field(..., pattern=_BILLING_MONTH_PATTERN)
    floor_electricity: dict[str, int] = Field(..., description="floor -> total bill in paise")
    floor_member_counts: dict[str, int] = Field(..., description="floor -> head-count")
    bulk_expenses: list[BulkExpenseRequest] = Field(default_factory=list)
    wifi_charges: WifiOverrideRequest | None = None

    @field_validator("floor_electricity", "floor_member_counts")
    @classmethod
    def known_floors(cls, v: dict[str, int]) -> dict[str, int]:
        return _check_floor_keys(v)

    def to_run(self) -> BillingRun:
        return BillingRun(
            billing_month=self.billing_month,
            floor_electricity=dict(self.floor_electricity),
            floor_member_counts=dict(self.floor_member_counts),
            bulk_expenses=tuple(
                BulkExpense(
                    member_ids=tuple(b.member_ids),
                    amount=b.amount,
                    description=b.description,
                )
                for b in self.bulk_expenses
            ),
            wifi_override=(
                WifiOverride(
                    member_ids=tuple(self.wifi_charges.member_ids),
                    amount=self.wifi_charges.amount,
                )
                if self.wifi_charges
                else None
            ),
        )


class RecordPaymentRequest(BaseModel):
    member_id: UuidStr
    billing_month: str = Field(..., pattern=_BILLING_MONTH_PATTERN)
    amount_paid: int = Field(..., description="Cumulative paid for the period; negatives clamp to 0")
    note: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class GenerationResultResponse(BaseModel):
    billing_month: str
    generated_count: int
    skipped_count: int
    errors: list[str]

    @classmethod
    def from_domain(cls, billing_month: str, r: GenerationResult) -> "GenerationResultResponse":
        return cls(
            billing_month=billing_month,
            generated_count=r.generated_count,
            skipped_count=r.skipped_count,
            errors=list(r.errors),
        )


class ExpenseItem(BaseModel):
    description: str
    amount: int


class LedgerEntryResponse(BaseModel):
    member_id: str
    billing_month: str
    rent: int
    electricity: int
    wifi: int
    previous_outstanding: int
    expenses: list[ExpenseItem]
    total_charges: int
    total_charges_display: str
    amount_paid: int
    current_outstanding: int
    current_outstanding_display: str
    status: str
    note: str | None
    pending_reconciliation: bool
    generated_at: str | None
    last_payment_at: str | None

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryResponse":
        return cls(
            member_id=e.member_id,
            billing_month=e.billing_month,
            rent=e.rent,
            electricity=e.electricity,
            wifi=e.wifi,
            previous_outstanding=e.previous_outstanding,
            expenses=[ExpenseItem(description=x.description, amount=x.amount) for x in e.expenses],
            total_charges=e.total_charges,
            total_charges_display=paise_to_display(e.total_charges),
            amount_paid=e.amount_paid,
            current_outstanding=e.current_outstanding,
            current_outstanding_display=paise_to_display(e.current_outstanding),
            status=e.status,
            note=e.note,
            pending_reconciliation=e.pending_reconciliation,
            generated_at=e.generated_at.isoformat() if e.generated_at else None,
            last_payment_at=e.last_payment_at.isoformat() if e.last_payment_at else None,
        )


class PaymentResponse(BaseModel):
    success: bool = True
    ledger_entry: LedgerEntryResponse
    outstanding_balance: int


class LedgerPageResponse(BaseModel):
    items: list[LedgerEntryResponse]
    next_cursor: str | None
    has_more: bool


class FloorCostItem(BaseModel):
    bill: int
    total_members: int


class BulkExpenseItem(BaseModel):
    member_ids: list[str]
    amount: int
    description: str


class ElectricBillResponse(BaseModel):
    billing_month: str
    floor_costs: dict[str, FloorCostItem]
    bulk_expenses: list[BulkExpenseItem]
    generated_at: str | None
    last_updated: str | None

    @classmethod
    def from_domain(cls, b: ElectricBill) -> "ElectricBillResponse":
        return cls(
            billing_month=b.billing_month,
            floor_costs={
                floor: FloorCostItem(bill=c.bill, total_members=c.total_members)
                for floor, c in b.floor_costs.items()
            },
            bulk_expenses=[
                BulkExpenseItem(
                    member_ids=list(x.member_ids), amount=x.amount, description=x.description
                )
                for x in b.bulk_expenses
            ],
            generated_at=b.generated_at.isoformat() if b.generated_at else None,
            last_updated=b.last_updated.isoformat() if b.last_updated else None,
        )


class MonthTotals(BaseModel):
    billing_month: str
    total_generated: int
    total_collected: int
    total_outstanding: int
    payment_rate: float


class RecentPaymentItem(BaseModel):
    member_id: str
    member_name: str
    billing_month: str
    amount_paid: int
    status: str
    paid_at: str | None


class UpcomingDueItem(BaseModel):
    member_id: str
    member_name: str
    billing_month: str
    amount_due: int
    due_date: str
    days_overdue: int
    status: str


class BillingSummaryResponse(BaseModel):
    current_month: MonthTotals
    recent_payments: list[RecentPaymentItem]
    upcoming_dues: list[UpcomingDueItem]


class BalanceMismatchItem(BaseModel):
    member_id: str
    member_name: str
    billing_month: str
    outstanding_balance: int
    ledger_outstanding: int
    difference: int


class PendingEntryItem(BaseModel):
    member_id: str
    billing_month: str
    current_outstanding: int


class InvariantReportResponse(BaseModel):
    consistent: bool
    mismatches: list[BalanceMismatchItem]
    pending_reconciliation: list[PendingEntryItem]

