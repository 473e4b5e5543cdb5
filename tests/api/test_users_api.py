from __future__ import annotations

import pytest
from httpx import AsyncClient

from becs_portal.models import User, UserRole

from ..conftest import LoginHelper, UserFactory

pytestmark = pytest.mark.asyncio

NEW_STAFF = {
    "email": "Amina.Otieno@example.com",
    "password": "welcome-1",
    "first_name": " Amina ",
    "last_name": "Otieno",
    "staff_id": "BECS-100",
    "department": "Health Economics",
}


async def test_admin_registers_staff_member(client: AsyncClient, admin: User, login: LoginHelper) -> None:
    headers = await login(admin)

    response = await client.post("/api/users", json=NEW_STAFF, headers=headers)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "amina.otieno@example.com"
    assert body["first_name"] == "Amina"
    assert body["full_name"] == "Amina Otieno"
    assert body["role"] == UserRole.STAFF.value
    assert "hashed_password" not in body
    assert "password" not in body


async def test_staff_cannot_register_users(client: AsyncClient, staff: User, login: LoginHelper) -> None:
    headers = await login(staff)

    response = await client.post("/api/users", json=NEW_STAFF, headers=headers)

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


async def test_duplicate_email_and_staff_id_conflict(
    client: AsyncClient, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)
    assert (await client.post("/api/users", json=NEW_STAFF, headers=headers)).status_code == 201

    same_email = await client.post("/api/users", json={**NEW_STAFF, "staff_id": "BECS-101"}, headers=headers)
    assert same_email.status_code == 409
    assert same_email.json()["code"] == "email_taken"

    same_staff_id = await client.post(
        "/api/users",
        json={**NEW_STAFF, "email": "someone.else@example.com"},
        headers=headers,
    )
    assert same_staff_id.status_code == 409
    assert same_staff_id.json()["code"] == "staff_id_taken"


async def test_create_user_validates_fields(client: AsyncClient, admin: User, login: LoginHelper) -> None:
    headers = await login(admin)

    response = await client.post(
        "/api/users",
        json={**NEW_STAFF, "email": "not-an-email", "password": "123"},
        headers=headers,
    )

    assert response.status_code == 422
    fields = response.json()["details"]["fields"]
    assert "email" in fields
    assert "password" in fields


async def test_list_users_filters(
    client: AsyncClient, make_user: UserFactory, admin: User, login: LoginHelper
) -> None:
    await make_user(UserRole.STAFF, department="Finance")
    await make_user(UserRole.DIRECTOR, department="Consulting")
    await make_user(UserRole.STAFF, department="Finance", is_active=False)
    headers = await login(admin)

    finance = await client.get("/api/users", params={"department": "Finance"}, headers=headers)
    assert finance.status_code == 200
    assert len(finance.json()) == 2

    directors = await client.get("/api/users", params={"role": "director"}, headers=headers)
    assert [user["role"] for user in directors.json()] == ["director"]

    inactive = await client.get("/api/users", params={"is_active": "false"}, headers=headers)
    assert len(inactive.json()) == 1


async def test_staff_updates_own_profile_only(
    client: AsyncClient, staff: User, make_user: UserFactory, login: LoginHelper
) -> None:
    other = await make_user(UserRole.STAFF)
    headers = await login(staff)

    own = await client.patch(f"/api/users/{staff.id}", json={"position": "Senior Analyst"}, headers=headers)
    assert own.status_code == 200
    assert own.json()["position"] == "Senior Analyst"

    escalate = await client.patch(f"/api/users/{staff.id}", json={"role": "admin"}, headers=headers)
    assert escalate.status_code == 403

    someone_else = await client.patch(f"/api/users/{other.id}", json={"position": "X"}, headers=headers)
    assert someone_else.status_code == 403


async def test_admin_deactivates_user_but_not_self(
    client: AsyncClient, admin: User, staff: User, login: LoginHelper
) -> None:
    headers = await login(admin)

    deactivated = await client.patch(f"/api/users/{staff.id}", json={"is_active": False}, headers=headers)
    assert deactivated.status_code == 200
    assert deactivated.json()["is_active"] is False

    self_deactivate = await client.patch(f"/api/users/{admin.id}", json={"is_active": False}, headers=headers)
    assert self_deactivate.status_code == 409


async def test_empty_update_is_rejected(client: AsyncClient, admin: User, login: LoginHelper) -> None:
    headers = await login(admin)

    response = await client.patch(f"/api/users/{admin.id}", json={}, headers=headers)

    assert response.status_code == 422


async def test_missing_user_is_404(client: AsyncClient, staff: User, login: LoginHelper) -> None:
    headers = await login(staff)

    response = await client.get("/api/users/9999", headers=headers)

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"
