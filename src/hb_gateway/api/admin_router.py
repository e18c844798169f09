"""Admin allowlist REST endpoints. Every route requires an existing admin."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.hb_common.database import get_db_session
from src.hb_common.response import ApiResponse, respond
from src.hb_gateway.admin.schemas import AddAdminRequest, AdminItem, AdminListResponse
from src.hb_gateway.admin.service import AdminService
from src.hb_gateway.auth.dependencies import require_admin
from src.hb_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admins", tags=["admins"])
_service = AdminService()


@router.get("", response_model=ApiResponse)
async def list_admins(
    request: Request,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    admins = await _service.list_admins(db)
    data = AdminListResponse(
        admins=[AdminItem.from_domain(a) for a in admins],
        max_admins=settings.MAX_ADMINS,
    )
    return respond(request, data.model_dump())


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def add_admin(
    request: Request,
    body: AddAdminRequest,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    entry = await _service.add_admin(db, body.user_id, body.role, str(admin.id))
    return respond(request, AdminItem.from_domain(entry).model_dump(), "Admin added")


@router.delete("/{user_id}", response_model=ApiResponse)
async def remove_admin(
    request: Request,
    user_id: str,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    await _service.remove_admin(db, user_id, str(admin.id))
    return respond(request, {"user_id": user_id}, "Admin removed")
