"""User service: register, login, refresh.

register() runs inside the router's ``async with db.begin()`` block; login()
commits its own last-login stamp.
"""

import logging

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_common.datetime_utils import utc_now
from src.hb_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.hb_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.hb_gateway.auth.password import hash_password, verify_password
from src.hb_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)

# First registered user becomes the primary admin; later ones insert nothing.
_BOOTSTRAP_PRIMARY_ADMIN_SQL = text("""
    INSERT INTO admins (user_id, email, role, added_by)
    SELECT :user_id, :email, 'primary', :user_id
    WHERE NOT EXISTS (SELECT 1 FROM admins)
    ON CONFLICT DO NOTHING
    RETURNING user_id
""")


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, bool]:
        """Create a user. Returns (user, became_primary_admin)."""
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(select(UserModel).where(UserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        await db.flush()

        bootstrap = await db.execute(
            _BOOTSTRAP_PRIMARY_ADMIN_SQL,
            {"user_id": str(user.id), "email": email},
        )
        became_admin = bootstrap.fetchone() is not None
        if became_admin:
            logger.info("User %s registered as primary admin", user.id)
        return user, became_admin

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown user and wrong password both raise InvalidCredentialsError so
        usernames cannot be enumerated.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        user.last_login_at = utc_now()
        await db.commit()

        return (
            user,
            create_access_token(str(user.id)),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate a refresh token and mint a new access token (no rotation)."""
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
