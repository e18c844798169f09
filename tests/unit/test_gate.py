"""Tests for AuthorizationGate and AdminService."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.hb_common.enums import AdminRole
from src.hb_common.errors import (
    AdminConfigNotFoundError,
    AdminExistsError,
    AdminLimitReachedError,
    AdminNotFoundError,
    PermissionDeniedError,
    PrimaryAdminRemovalError,
    UnauthenticatedError,
    UserNotFoundError,
)
from src.hb_gateway.admin.models import AdminEntry
from src.hb_gateway.admin.service import AdminService
from src.hb_gateway.auth.gate import AuthorizationGate
from src.hb_gateway.user.db_models import UserModel

PRIMARY = AdminEntry(user_id="u-1", email="owner@example.com", role="primary")
SECONDARY = AdminEntry(user_id="u-2", email="warden@example.com", role="secondary")


def _repo(admins: list[AdminEntry]) -> AsyncMock:
    repo = AsyncMock()
    repo.list_admins.return_value = list(admins)
    return repo


class TestAuthorizationGate:
    async def test_admin_passes(self) -> None:
        gate = AuthorizationGate(repo=_repo([PRIMARY, SECONDARY]))
        assert await gate.ensure_admin(MagicMock(), "u-2") == SECONDARY

    async def test_missing_caller_is_unauthenticated(self) -> None:
        gate = AuthorizationGate(repo=_repo([PRIMARY]))
        with pytest.raises(UnauthenticatedError):
            await gate.ensure_admin(MagicMock(), None)

    async def test_non_admin_is_denied(self) -> None:
        gate = AuthorizationGate(repo=_repo([PRIMARY]))
        with pytest.raises(PermissionDeniedError):
            await gate.ensure_admin(MagicMock(), "u-9")

    async def test_empty_allowlist_is_config_not_found(self) -> None:
        gate = AuthorizationGate(repo=_repo([]))
        with pytest.raises(AdminConfigNotFoundError):
            await gate.ensure_admin(MagicMock(), "u-1")

    async def test_is_admin_never_raises_for_missing_config(self) -> None:
        assert await AuthorizationGate(repo=_repo([])).is_admin(MagicMock(), "u-1") is False
        assert await AuthorizationGate(repo=_repo([PRIMARY])).is_admin(MagicMock(), "u-1") is True


def _db_with_user(user: UserModel | None) -> AsyncMock:
    db = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    db.execute = AsyncMock(return_value=result)
    return db


def _user() -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = "bob"
    user.email = "bob@example.com"
    user.is_active = True
    return user


class TestAdminService:
    async def test_add_secondary(self) -> None:
        user = _user()
        repo = _repo([PRIMARY])
        repo.add_admin.side_effect = lambda db, entry: entry
        db = _db_with_user(user)

        entry = await AdminService(repo=repo).add_admin(db, str(user.id), AdminRole.SECONDARY, "u-1")

        assert entry.email == "bob@example.com"
        assert entry.role == "secondary"
        assert entry.added_by == "u-1"
        db.commit.assert_awaited_once()

    async def test_duplicate(self) -> None:
        with pytest.raises(AdminExistsError):
            await AdminService(repo=_repo([PRIMARY])).add_admin(
                _db_with_user(_user()), "u-1", AdminRole.SECONDARY, "u-1"
            )

    async def test_limit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from config.settings import settings

        monkeypatch.setattr(settings, "MAX_ADMINS", 2)
        with pytest.raises(AdminLimitReachedError):
            await AdminService(repo=_repo([PRIMARY, SECONDARY])).add_admin(
                _db_with_user(_user()), "u-3", AdminRole.SECONDARY, "u-1"
            )

    async def test_unknown_user(self) -> None:
        with pytest.raises(UserNotFoundError):
            await AdminService(repo=_repo([PRIMARY])).add_admin(
                _db_with_user(None), "u-3", AdminRole.SECONDARY, "u-1"
            )

    async def test_primary_cannot_be_removed(self) -> None:
        with pytest.raises(PrimaryAdminRemovalError):
            await AdminService(repo=_repo([PRIMARY, SECONDARY])).remove_admin(
                AsyncMock(), "u-1", "u-2"
            )

    async def test_remove_unknown(self) -> None:
        with pytest.raises(AdminNotFoundError):
            await AdminService(repo=_repo([PRIMARY])).remove_admin(AsyncMock(), "u-7", "u-1")

    async def test_remove_secondary(self) -> None:
        repo = _repo([PRIMARY, SECONDARY])
        db = AsyncMock()
        await AdminService(repo=repo).remove_admin(db, "u-2", "u-1")
        repo.remove_admin.assert_awaited_once_with(db, "u-2")
        db.commit.assert_awaited_once()
