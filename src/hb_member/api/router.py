"""Member REST endpoints.

Mutations and listings are admin-only. A resident may read the member record
linked to their own user id.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_common.database import get_db_session
from src.hb_common.enums import Floor
from src.hb_common.ids import UuidStr
from src.hb_common.errors import MemberNotFoundError
from src.hb_common.response import ApiResponse, respond
from src.hb_gateway.auth.dependencies import get_current_user, get_gate, require_admin
from src.hb_gateway.auth.gate import AuthorizationGate
from src.hb_gateway.user.db_models import UserModel
from src.hb_member.application.schemas import (
    AddMemberRequest,
    DeactivateMemberRequest,
    MemberListResponse,
    MemberResponse,
    SettlementResponse,
    UpdateMemberRequest,
)
from src.hb_member.application.service import MemberService

router = APIRouter(prefix="/members", tags=["members"])
_service = MemberService()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def add_member(
    request: Request,
    body: AddMemberRequest,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    member = await _service.add_member(db, body)
    return respond(request, MemberResponse.from_domain(member).model_dump(), "Member added")


@router.get("", response_model=ApiResponse)
async def list_members(
    request: Request,
    include_inactive: bool = Query(False),
    floor: Floor | None = Query(None),
    search: str | None = Query(None, max_length=100),
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    members = await _service.list_members(
        db,
        include_inactive=include_inactive,
        floor=floor.value if floor else None,
        search=search,
    )
    data = MemberListResponse(
        members=[MemberResponse.from_domain(m) for m in members],
        total=len(members),
    )
    return respond(request, data.model_dump())


@router.get("/me", response_model=ApiResponse)
async def get_my_member(
    request: Request,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    member = await _service.find_member_for_user(db, str(current_user.id))
    if member is None:
        raise MemberNotFoundError(f"user {current_user.id}")
    return respond(request, MemberResponse.from_domain(member).model_dump())


@router.get("/{member_id}", response_model=ApiResponse)
async def get_member(
    request: Request,
    member_id: UuidStr,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    gate: AuthorizationGate = Depends(get_gate),
) -> ApiResponse:
    member = await _service.get_member(db, member_id)
    if member.user_id != str(current_user.id):
        await gate.ensure_admin(db, str(current_user.id))
    return respond(request, MemberResponse.from_domain(member).model_dump())


@router.patch("/{member_id}", response_model=ApiResponse)
async def update_member(
    request: Request,
    member_id: UuidStr,
    body: UpdateMemberRequest,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    member = await _service.update_member(db, member_id, body)
    return respond(request, MemberResponse.from_domain(member).model_dump(), "Member updated")


@router.get("/{member_id}/settlement", response_model=ApiResponse)
async def preview_settlement(
    request: Request,
    member_id: UuidStr,
    leave_date: date = Query(...),
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    settlement = await _service.preview_settlement(db, member_id, leave_date)
    return respond(request, SettlementResponse.from_domain(settlement).model_dump())


@router.post("/{member_id}/deactivate", response_model=ApiResponse)
async def deactivate_member(
    request: Request,
    member_id: UuidStr,
    body: DeactivateMemberRequest,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    member, settlement = await _service.deactivate_member(db, member_id, body.leave_date)
    data = {
        "member": MemberResponse.from_domain(member).model_dump(),
        "settlement": SettlementResponse.from_domain(settlement).model_dump(),
    }
    return respond(request, data, "Member deactivated")
