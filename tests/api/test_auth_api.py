from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from becs_portal.models import User, UserRole

from ..conftest import TEST_PASSWORD, LoginHelper, UserFactory

pytestmark = pytest.mark.asyncio


async def _login(client: AsyncClient, email: str, password: str = TEST_PASSWORD):
    return await client.post("/api/auth/login", data={"username": email, "password": password})


async def test_login_returns_user_and_token_pair(client: AsyncClient, staff: User) -> None:
    response = await _login(client, staff.email)

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == staff.id
    assert body["user"]["role"] == UserRole.STAFF.value
    assert body["user"]["full_name"] == staff.full_name
    tokens = body["tokens"]
    assert tokens["token_type"] == "bearer"
    assert tokens["access_token"] != tokens["refresh_token"]
    assert tokens["expires_in"] > 0


async def test_login_is_case_insensitive_on_email(client: AsyncClient, staff: User) -> None:
    response = await _login(client, staff.email.upper())

    assert response.status_code == 200


async def test_login_rejects_bad_password(client: AsyncClient, staff: User) -> None:
    response = await _login(client, staff.email, "wrong-password")

    assert response.status_code == 401
    assert response.json()["code"] == "invalid_credentials"
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_login_rejects_inactive_user(client: AsyncClient, make_user: UserFactory) -> None:
    inactive = await make_user(UserRole.STAFF, is_active=False)

    response = await _login(client, inactive.email)

    assert response.status_code == 403
    assert response.json()["code"] == "inactive_user"


async def test_current_user_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/auth/user")

    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


async def test_current_user_rejects_garbage_token(client: AsyncClient) -> None:
    response = await client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


async def test_current_user_returns_profile(client: AsyncClient, director: User, login: LoginHelper) -> None:
    headers = await login(director)

    response = await client.get("/api/auth/user", headers=headers)

    assert response.status_code == 200
    assert response.json()["email"] == director.email
    assert response.json()["role"] == UserRole.DIRECTOR.value


async def test_refresh_rotates_tokens_and_revokes_old_refresh(client: AsyncClient, staff: User) -> None:
    tokens = (await _login(client, staff.email)).json()["tokens"]

    refreshed = await client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    new_tokens = refreshed.json()["tokens"]
    assert new_tokens["refresh_token"] != tokens["refresh_token"]

    replay = await client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert replay.status_code == 401
    assert replay.json()["code"] == "token_revoked"


async def test_refresh_rejects_access_token(client: AsyncClient, staff: User) -> None:
    tokens = (await _login(client, staff.email)).json()["tokens"]

    response = await client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


async def test_logout_revokes_access_and_refresh_tokens(client: AsyncClient, staff: User) -> None:
    tokens = (await _login(client, staff.email)).json()["tokens"]
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await client.post(
        "/api/auth/logout",
        json={"refresh_token": tokens["refresh_token"]},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == {"revoked": 2}

    after = await client.get("/api/auth/user", headers=headers)
    assert after.status_code == 401
    refresh = await client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refresh.status_code == 401


async def test_logout_without_refresh_token(client: AsyncClient, staff: User, login: LoginHelper) -> None:
    headers = await login(staff)

    response = await client.post("/api/auth/logout", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"revoked": 1}


async def test_demotion_takes_effect_on_existing_tokens(
    client: AsyncClient, session: AsyncSession, director: User, login: LoginHelper
) -> None:
    headers = await login(director)
    director.role = UserRole.STAFF
    session.add(director)
    await session.commit()

    response = await client.post(
        "/api/projects",
        json={"code": "DEM-1", "name": "Demoted", "type": "Private"},
        headers=headers,
    )

    assert response.status_code == 403


async def test_promotion_needs_a_fresh_login(
    client: AsyncClient, session: AsyncSession, staff: User, login: LoginHelper
) -> None:
    stale_headers = await login(staff)
    staff.role = UserRole.DIRECTOR
    session.add(staff)
    await session.commit()
    payload = {"code": "PRO-1", "name": "Promoted", "type": "Private"}

    stale = await client.post("/api/projects", json=payload, headers=stale_headers)
    fresh = await client.post("/api/projects", json=payload, headers=await login(staff))

    assert stale.status_code == 403
    assert fresh.status_code == 201
