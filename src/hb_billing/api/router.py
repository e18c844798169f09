"""Billing REST endpoints.

Generation, payments, the billing summary, the current electric bill and the
invariant report are admin-only: each exposes every member's charges. A
member's ledger is readable by admins and by the resident linked to that
member.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_billing.application.generator import BillingCycleGenerator
from src.hb_billing.application.payments import PaymentRecorder
from src.hb_billing.application.reconciliation import ReconciliationService
from src.hb_billing.application.schemas import (
    GenerateBillsRequest,
    GenerationResultResponse,
    LedgerEntryResponse,
    PaymentResponse,
    RecordPaymentRequest,
)
from src.hb_billing.application.summary import BillingQueryService
from src.hb_common.database import get_db_session
from src.hb_common.ids import UuidStr
from src.hb_common.response import ApiResponse, respond
from src.hb_gateway.auth.dependencies import get_current_user, get_gate, require_admin
from src.hb_gateway.auth.gate import AuthorizationGate
from src.hb_gateway.user.db_models import UserModel
from src.hb_member.application.service import MemberService
from src.hb_settings.application.service import SettingsService

router = APIRouter(prefix="/billing", tags=["billing"])
member_ledger_router = APIRouter(prefix="/members", tags=["billing"])

_generator = BillingCycleGenerator()
_payments = PaymentRecorder()
_queries = BillingQueryService()
_reconciliation = ReconciliationService()
_settings = SettingsService()
_members = MemberService()


@router.post("/generate", response_model=ApiResponse)
async def generate_bills(
    request: Request,
    body: GenerateBillsRequest,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    current_settings = await _settings.load(db)
    result = await _generator.generate(db, body.to_run(), current_settings)
    data = GenerationResultResponse.from_domain(body.billing_month, result)
    message = "Bills generated" if not result.errors else "Bills generated with errors"
    return respond(request, data.model_dump(), message)


@router.post("/payments", response_model=ApiResponse)
async def record_payment(
    request: Request,
    body: RecordPaymentRequest,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    entry, member = await _payments.record_payment(
        db, body.member_id, body.billing_month, body.amount_paid, body.note
    )
    data = PaymentResponse(
        ledger_entry=LedgerEntryResponse.from_domain(entry),
        outstanding_balance=member.outstanding_balance,
    )
    return respond(request, data.model_dump(), "Payment recorded")


@router.get("/electric-bills/current", response_model=ApiResponse)
async def current_electric_bill(
    request: Request,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    bill = await _queries.current_electric_bill(db)
    return respond(request, bill.model_dump() if bill else None)


@router.get("/summary", response_model=ApiResponse)
async def billing_summary(
    request: Request,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    current_settings = await _settings.load(db)
    data = await _queries.billing_summary(db, current_settings, date.today())
    return respond(request, data.model_dump())


@router.get("/invariants", response_model=ApiResponse)
async def balance_invariants(
    request: Request,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    data = await _reconciliation.report(db)
    return respond(request, data.model_dump())


@member_ledger_router.get("/{member_id}/ledger", response_model=ApiResponse)
async def member_ledger(
    request: Request,
    member_id: UuidStr,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(12, ge=1, le=50, description="Items per page"),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    gate: AuthorizationGate = Depends(get_gate),
) -> ApiResponse:
    member = await _members.get_member(db, member_id)
    if member.user_id != str(current_user.id):
        await gate.ensure_admin(db, str(current_user.id))
    data = await _queries.member_ledger(db, member_id, cursor, limit)
    return respond(request, data.model_dump())
