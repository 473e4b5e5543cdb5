from __future__ import annotations

import pytest
from httpx import AsyncClient

from becs_portal.models import User

from ..conftest import LoginHelper, UserFactory

pytestmark = pytest.mark.asyncio

ANNUAL_LEAVE = {
    "leave_type": "annual",
    "start_date": "2024-07-01",
    "end_date": "2024-07-05",
    "reason": "Family trip planned since January.",
}


async def test_apply_computes_inclusive_days(client: AsyncClient, staff: User, login: LoginHelper) -> None:
    response = await client.post("/api/leave-applications", json=ANNUAL_LEAVE, headers=await login(staff))

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == staff.id
    assert body["status"] == "pending"
    assert body["total_days"] == 5


async def test_apply_validates_reason_and_dates(client: AsyncClient, staff: User, login: LoginHelper) -> None:
    headers = await login(staff)

    short_reason = await client.post(
        "/api/leave-applications",
        json={**ANNUAL_LEAVE, "reason": "  short  "},
        headers=headers,
    )
    assert short_reason.status_code == 422
    assert "reason" in short_reason.json()["details"]["fields"]

    reversed_dates = await client.post(
        "/api/leave-applications",
        json={**ANNUAL_LEAVE, "end_date": "2024-06-30"},
        headers=headers,
    )
    assert reversed_dates.status_code == 422

    unknown_type = await client.post(
        "/api/leave-applications",
        json={**ANNUAL_LEAVE, "leave_type": "sabbatical"},
        headers=headers,
    )
    assert unknown_type.status_code == 422


async def test_director_approves_and_decision_is_final(
    client: AsyncClient, staff: User, director: User, login: LoginHelper
) -> None:
    staff_headers = await login(staff)
    created = (await client.post("/api/leave-applications", json=ANNUAL_LEAVE, headers=staff_headers)).json()
    director_headers = await login(director)

    approved = await client.post(
        f"/api/leave-applications/{created['id']}/decision",
        json={"status": "approved", "comments": "Enjoy"},
        headers=director_headers,
    )
    assert approved.status_code == 200
    body = approved.json()
    assert body["status"] == "approved"
    assert body["reviewer_id"] == director.id
    assert body["review_comments"] == "Enjoy"
    assert body["reviewed_at"] is not None

    again = await client.post(
        f"/api/leave-applications/{created['id']}/decision",
        json={"status": "rejected"},
        headers=director_headers,
    )
    assert again.status_code == 409

    cancel = await client.post(f"/api/leave-applications/{created['id']}/cancel", headers=staff_headers)
    assert cancel.status_code == 409


async def test_staff_cannot_decide_and_only_applicant_cancels(
    client: AsyncClient, staff: User, make_user: UserFactory, login: LoginHelper
) -> None:
    staff_headers = await login(staff)
    created = (await client.post("/api/leave-applications", json=ANNUAL_LEAVE, headers=staff_headers)).json()
    colleague_headers = await login(await make_user())

    decide = await client.post(
        f"/api/leave-applications/{created['id']}/decision",
        json={"status": "approved"},
        headers=staff_headers,
    )
    assert decide.status_code == 403

    colleague_cancel = await client.post(
        f"/api/leave-applications/{created['id']}/cancel",
        headers=colleague_headers,
    )
    assert colleague_cancel.status_code == 403

    cancelled = await client.post(f"/api/leave-applications/{created['id']}/cancel", headers=staff_headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"


async def test_listing_is_scoped_for_staff(
    client: AsyncClient, staff: User, admin: User, make_user: UserFactory, login: LoginHelper
) -> None:
    colleague = await make_user()
    staff_headers = await login(staff)
    await client.post("/api/leave-applications", json=ANNUAL_LEAVE, headers=staff_headers)
    await client.post(
        "/api/leave-applications",
        json={**ANNUAL_LEAVE, "leave_type": "sick"},
        headers=await login(colleague),
    )

    own = await client.get("/api/leave-applications", headers=staff_headers)
    assert [item["user_id"] for item in own.json()] == [staff.id]

    snooping = await client.get(
        "/api/leave-applications",
        params={"user_id": colleague.id},
        headers=staff_headers,
    )
    assert snooping.status_code == 403

    admin_headers = await login(admin)
    everyone = await client.get("/api/leave-applications", headers=admin_headers)
    assert len(everyone.json()) == 2
    sick = await client.get(
        "/api/leave-applications",
        params={"status": "pending", "user_id": colleague.id},
        headers=admin_headers,
    )
    assert [item["leave_type"] for item in sick.json()] == ["sick"]
