"""Global settings REST endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_common.database import get_db_session
from src.hb_common.response import ApiResponse, respond
from src.hb_gateway.auth.dependencies import get_current_user, require_admin
from src.hb_gateway.user.db_models import UserModel
from src.hb_settings.application.schemas import SettingsResponse, UpdateSettingsRequest
from src.hb_settings.application.service import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])
_service = SettingsService()


@router.get("", response_model=ApiResponse)
async def get_settings(
    request: Request,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    current = await _service.load(db)
    return respond(request, SettingsResponse.from_domain(current).model_dump())


@router.patch("", response_model=ApiResponse)
async def update_settings(
    request: Request,
    body: UpdateSettingsRequest,
    admin: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    saved = await _service.update_settings(db, body)
    return respond(request, SettingsResponse.from_domain(saved).model_dump(), "Settings updated")
