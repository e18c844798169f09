"""HTTP-level tests: envelope, auth wiring, and error mapping.

Services are swapped for AsyncMocks; the DB session and caller identity come
from dependency overrides, so no database is touched.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from billing_fakes import make_member
from src.hb_billing.api import router as billing_api
from src.hb_billing.domain.models import GenerationResult, LedgerEntry
from src.hb_common.database import get_db_session
from src.hb_common.errors import (
    MemberNotFoundError,
    PermissionDeniedError,
    StaleConfigurationError,
)
from src.hb_gateway.auth.dependencies import get_current_user, get_gate, require_admin
from src.hb_gateway.user.db_models import UserModel
from src.hb_member.api import router as member_api
from src.hb_settings.api import router as settings_api
from src.main import app

_CALLER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")
_MEMBER_ID = "00000000-0000-0000-0000-0000000000b1"


def _caller() -> UserModel:
    user = UserModel()
    user.id = _CALLER_ID
    user.username = "warden"
    user.email = "warden@example.com"
    user.is_active = True
    return user


async def _fake_db():  # type: ignore[no-untyped-def]
    yield AsyncMock()


def _deny_admin() -> UserModel:
    raise PermissionDeniedError()


@pytest.fixture
def as_admin() -> MagicMock:
    gate = MagicMock()
    gate.ensure_admin = AsyncMock()
    gate.is_admin = AsyncMock(return_value=True)
    app.dependency_overrides[get_db_session] = _fake_db
    app.dependency_overrides[get_current_user] = _caller
    app.dependency_overrides[require_admin] = _caller
    app.dependency_overrides[get_gate] = lambda: gate
    return gate


@pytest.fixture
def as_resident() -> MagicMock:
    gate = MagicMock()
    gate.ensure_admin = AsyncMock(side_effect=PermissionDeniedError())
    gate.is_admin = AsyncMock(return_value=False)
    app.dependency_overrides[get_db_session] = _fake_db
    app.dependency_overrides[get_current_user] = _caller
    app.dependency_overrides[require_admin] = _deny_admin
    app.dependency_overrides[get_gate] = lambda: gate
    return gate


def _entry() -> LedgerEntry:
    return LedgerEntry(
        member_id="m-1",
        billing_month="2026-02",
        rent=200000,
        electricity=30000,
        wifi=0,
        previous_outstanding=0,
        expenses=[],
        total_charges=230000,
        amount_paid=100000,
        current_outstanding=130000,
        status="PARTIALLY_PAID",
    )


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_missing_token_is_401_envelope(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/members/me")
    assert resp.status_code == 401
    body = resp.json()
    assert body["code"] == 1001
    assert body["data"] is None
    assert body["request_id"] == resp.headers["X-Request-ID"]


async def test_validation_error_uses_code_2001(
    client: AsyncClient, as_admin: MagicMock
) -> None:
    resp = await client.post(
        "/api/v1/billing/generate",
        json={"billing_month": "Feb 2026", "floor_electricity": {}, "floor_member_counts": {}},
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == 2001
    assert "billing_month" in resp.json()["message"]


async def test_unknown_floor_rejected(client: AsyncClient, as_admin: MagicMock) -> None:
    resp = await client.post(
        "/api/v1/billing/generate",
        json={
            "billing_month": "2026-02",
            "floor_electricity": {"9th": 1000},
            "floor_member_counts": {"9th": 1},
        },
    )
    assert resp.json()["code"] == 2001


async def test_generate_returns_counts_and_errors(
    client: AsyncClient, as_admin: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    settings_service = MagicMock()
    settings_service.load = AsyncMock(return_value=MagicMock())
    generator = MagicMock()
    generator.generate = AsyncMock(
        return_value=GenerationResult(generated_count=3, skipped_count=1, errors=["boom"])
    )
    monkeypatch.setattr(billing_api, "_settings", settings_service)
    monkeypatch.setattr(billing_api, "_generator", generator)

    resp = await client.post(
        "/api/v1/billing/generate",
        json={
            "billing_month": "2026-02",
            "floor_electricity": {"2nd": 90000},
            "floor_member_counts": {"2nd": 3},
            "bulk_expenses": [{"member_ids": ["m-1"], "amount": 5000, "description": "Gas"}],
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["code"] == 0
    assert body["message"] == "Bills generated with errors"
    assert body["data"] == {
        "billing_month": "2026-02",
        "generated_count": 3,
        "skipped_count": 1,
        "errors": ["boom"],
    }
    run = generator.generate.await_args.args[1]
    assert run.bulk_expenses[0].member_ids == ("m-1",)


async def test_generate_forbidden_for_resident(
    client: AsyncClient, as_resident: MagicMock
) -> None:
    resp = await client.post(
        "/api/v1/billing/generate",
        json={"billing_month": "2026-02", "floor_electricity": {}, "floor_member_counts": {}},
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == 1002


@pytest.mark.parametrize(
    "path", ["/api/v1/billing/summary", "/api/v1/billing/electric-bills/current"]
)
async def test_billing_overviews_forbidden_for_resident(
    client: AsyncClient, as_resident: MagicMock, path: str
) -> None:
    resp = await client.get(path)
    assert resp.status_code == 403
    assert resp.json()["code"] == 1002


async def test_record_payment(
    client: AsyncClient, as_admin: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    payments = MagicMock()
    payments.record_payment = AsyncMock(
        return_value=(_entry(), make_member(outstanding_balance=130000))
    )
    monkeypatch.setattr(billing_api, "_payments", payments)

    resp = await client.post(
        "/api/v1/billing/payments",
        json={"member_id": _MEMBER_ID, "billing_month": "2026-02", "amount_paid": 100000},
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["outstanding_balance"] == 130000
    assert data["ledger_entry"]["status"] == "PARTIALLY_PAID"
    payments.record_payment.assert_awaited_once()


async def test_payment_with_malformed_member_id_is_rejected(
    client: AsyncClient, as_admin: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    payments = MagicMock()
    payments.record_payment = AsyncMock()
    monkeypatch.setattr(billing_api, "_payments", payments)

    resp = await client.post(
        "/api/v1/billing/payments",
        json={"member_id": "abc", "billing_month": "2026-02", "amount_paid": 100000},
    )

    assert resp.status_code == 422
    assert resp.json()["code"] == 2001
    payments.record_payment.assert_not_awaited()


@pytest.mark.parametrize("path", ["/api/v1/members/abc", "/api/v1/members/abc/ledger"])
async def test_malformed_member_id_in_path_is_rejected(
    client: AsyncClient, as_admin: MagicMock, path: str
) -> None:
    resp = await client.get(path)
    assert resp.status_code == 422
    assert resp.json()["code"] == 2001


async def test_member_not_found_maps_to_404(
    client: AsyncClient, as_admin: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = MagicMock()
    service.get_member = AsyncMock(side_effect=MemberNotFoundError("m-404"))
    monkeypatch.setattr(member_api, "_service", service)

    resp = await client.get(f"/api/v1/members/{_MEMBER_ID}")

    assert resp.status_code == 404
    assert resp.json()["data"] is None


async def test_resident_reads_own_member_record(
    client: AsyncClient, as_resident: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = MagicMock()
    service.get_member = AsyncMock(return_value=make_member(user_id=str(_CALLER_ID)))
    monkeypatch.setattr(member_api, "_service", service)

    resp = await client.get(f"/api/v1/members/{_MEMBER_ID}")

    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == "m-1"
    as_resident.ensure_admin.assert_not_awaited()


async def test_resident_cannot_read_other_member(
    client: AsyncClient, as_resident: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = MagicMock()
    service.get_member = AsyncMock(return_value=make_member(user_id="someone-else"))
    monkeypatch.setattr(member_api, "_service", service)

    resp = await client.get(f"/api/v1/members/{_MEMBER_ID}")

    assert resp.status_code == 403


async def test_resident_cannot_read_other_ledger(
    client: AsyncClient, as_resident: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    members = MagicMock()
    members.get_member = AsyncMock(return_value=make_member(user_id="someone-else"))
    queries = MagicMock()
    queries.member_ledger = AsyncMock()
    monkeypatch.setattr(billing_api, "_members", members)
    monkeypatch.setattr(billing_api, "_queries", queries)

    resp = await client.get(f"/api/v1/members/{_MEMBER_ID}/ledger")

    assert resp.status_code == 403
    queries.member_ledger.assert_not_awaited()


async def test_ledger_limit_bounds(client: AsyncClient, as_admin: MagicMock) -> None:
    resp = await client.get(f"/api/v1/members/{_MEMBER_ID}/ledger", params={"limit": 51})
    assert resp.json()["code"] == 2001


async def test_stale_settings_update_is_409(
    client: AsyncClient, as_admin: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = MagicMock()
    service.update_settings = AsyncMock(side_effect=StaleConfigurationError(3, 5))
    monkeypatch.setattr(settings_api, "_service", service)

    resp = await client.patch(
        "/api/v1/settings", json={"expected_version": 3, "wifi_monthly_charge": 35000}
    )

    assert resp.status_code == 409
