"""FastAPI dependencies: get_current_user and require_admin.

Usage in any protected router:
    from src.hb_gateway.auth.dependencies import get_current_user, require_admin

    @router.post("/mutating")
    async def handler(admin: UserModel = Depends(require_admin)):
        ...
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_common.database import get_db_session
from src.hb_common.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    UnauthenticatedError,
)
from src.hb_gateway.auth.gate import AuthorizationGate
from src.hb_gateway.auth.jwt_handler import decode_token
from src.hb_gateway.user.db_models import UserModel

# auto_error=False: a missing token becomes UnauthenticatedError (AppError envelope)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

_gate = AuthorizationGate()


def get_gate() -> AuthorizationGate:
    return _gate


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Resolve the Bearer token to an active UserModel.

    Raises UnauthenticatedError (401) if the token is missing, invalid,
    expired, or names a user that no longer exists.
    Raises AccountDisabledError (403) if the user is disabled.
    """
    if not token:
        raise UnauthenticatedError()
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise UnauthenticatedError() from None

    user_id: str | None = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError()

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UnauthenticatedError()

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    gate: AuthorizationGate = Depends(get_gate),
) -> UserModel:
    """Pass only callers on the admin allowlist (PermissionDeniedError otherwise)."""
    await gate.ensure_admin(db, str(current_user.id))
    return current_user
