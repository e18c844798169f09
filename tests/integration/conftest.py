"""Integration-test fixtures (requires running PG, migrated to head).

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool stays valid across the entire test session.
"""

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.hb_common.database import async_session_factory
from src.main import app

_GRANT_ADMIN_SQL = text("""
    INSERT INTO admins (user_id, email, role, added_by)
    VALUES (:user_id, :email, 'secondary', NULL)
    ON CONFLICT (user_id) DO NOTHING
""")


def unique_user() -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"warden_{uid}",
        "email": f"warden_{uid}@example.com",
        "password": "TestPass1",
    }


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin_client(client: AsyncClient) -> AsyncClient:
    """Client authenticated as a user on the admin allowlist.

    The first user in a fresh database is bootstrapped as primary admin; on a
    reused database the user is granted a secondary seat directly.
    """
    creds = unique_user()
    reg = await client.post("/api/v1/auth/register", json=creds)
    user_id = reg.json()["data"]["user_id"]
    async with async_session_factory() as session:
        await session.execute(_GRANT_ADMIN_SQL, {"user_id": user_id, "email": creds["email"]})
        await session.commit()

    login = await client.post(
        "/api/v1/auth/login",
        json={"username": creds["username"], "password": creds["password"]},
    )
    token = login.json()["data"]["access_token"]
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client
