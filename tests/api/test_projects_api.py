from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from becs_portal.models import Task, TaskStatus, User

from ..conftest import LoginHelper

pytestmark = pytest.mark.asyncio

AHP_PROJECT = {
    "code": "AHP-C1-001",
    "name": "Community Health Financing Review",
    "type": "AHP",
    "consortium": "consortium_1",
    "client_name": "Ministry of Health",
    "start_date": "2024-01-15",
    "end_date": "2024-12-20",
}
PRIVATE_PROJECT = {"code": "PRV-001", "name": "Retail Market Study", "type": "Private"}


async def test_create_project_defaults_to_active(client: AsyncClient, admin: User, login: LoginHelper) -> None:
    headers = await login(admin)

    response = await client.post("/api/projects", json=AHP_PROJECT, headers=headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "active"
    assert body["consortium"] == "consortium_1"
    assert body["is_archived"] is False
    assert body["task_count"] == 0
    assert body["completion_percentage"] == 0.0


async def test_private_project_cannot_join_consortium(
    client: AsyncClient, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)

    response = await client.post(
        "/api/projects",
        json={**PRIVATE_PROJECT, "consortium": "consortium_2"},
        headers=headers,
    )

    assert response.status_code == 422


async def test_end_date_before_start_is_rejected(client: AsyncClient, admin: User, login: LoginHelper) -> None:
    headers = await login(admin)

    response = await client.post(
        "/api/projects",
        json={**AHP_PROJECT, "start_date": "2024-05-01", "end_date": "2024-04-01"},
        headers=headers,
    )

    assert response.status_code == 422


async def test_project_code_is_unique_ignoring_case(
    client: AsyncClient, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)
    await client.post("/api/projects", json=AHP_PROJECT, headers=headers)

    duplicate = await client.post(
        "/api/projects",
        json={**PRIVATE_PROJECT, "code": "ahp-c1-001"},
        headers=headers,
    )

    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "project_code_taken"


async def test_staff_reads_but_cannot_write_projects(
    client: AsyncClient, admin: User, staff: User, login: LoginHelper
) -> None:
    admin_headers = await login(admin)
    created = (await client.post("/api/projects", json=AHP_PROJECT, headers=admin_headers)).json()
    headers = await login(staff)

    assert (await client.get("/api/projects", headers=headers)).status_code == 200
    assert (await client.get(f"/api/projects/{created['id']}", headers=headers)).status_code == 200
    assert (await client.post("/api/projects", json=PRIVATE_PROJECT, headers=headers)).status_code == 403
    patched = await client.patch(f"/api/projects/{created['id']}", json={"name": "x"}, headers=headers)
    assert patched.status_code == 403


async def test_update_allows_any_status_and_revalidates(
    client: AsyncClient, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)
    created = (await client.post("/api/projects", json=AHP_PROJECT, headers=headers)).json()

    on_hold = await client.patch(f"/api/projects/{created['id']}", json={"status": "on_hold"}, headers=headers)
    assert on_hold.status_code == 200
    assert on_hold.json()["status"] == "on_hold"

    planning = await client.patch(f"/api/projects/{created['id']}", json={"status": "planning"}, headers=headers)
    assert planning.json()["status"] == "planning"

    bad_dates = await client.patch(
        f"/api/projects/{created['id']}",
        json={"end_date": "2023-01-01"},
        headers=headers,
    )
    assert bad_dates.status_code == 422

    to_private = await client.patch(f"/api/projects/{created['id']}", json={"type": "Private"}, headers=headers)
    assert to_private.status_code == 200
    assert to_private.json()["consortium"] is None


async def test_delete_archives_and_hides_from_default_list(
    client: AsyncClient, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)
    created = (await client.post("/api/projects", json=AHP_PROJECT, headers=headers)).json()

    archived = await client.delete(f"/api/projects/{created['id']}", headers=headers)
    assert archived.status_code == 200
    assert archived.json()["is_archived"] is True

    default_list = await client.get("/api/projects", headers=headers)
    assert default_list.json() == []
    with_archived = await client.get("/api/projects", params={"include_archived": "true"}, headers=headers)
    assert [item["id"] for item in with_archived.json()] == [created["id"]]
    assert (await client.get(f"/api/projects/{created['id']}", headers=headers)).status_code == 200


async def test_list_filters_by_type_and_consortium(
    client: AsyncClient, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)
    await client.post("/api/projects", json=AHP_PROJECT, headers=headers)
    await client.post(
        "/api/projects",
        json={**AHP_PROJECT, "code": "AHP-C3-001", "consortium": "consortium_3"},
        headers=headers,
    )
    await client.post("/api/projects", json=PRIVATE_PROJECT, headers=headers)

    private = await client.get("/api/projects", params={"type": "Private"}, headers=headers)
    assert [item["code"] for item in private.json()] == ["PRV-001"]

    third = await client.get("/api/projects", params={"consortium": "consortium_3"}, headers=headers)
    assert [item["code"] for item in third.json()] == ["AHP-C3-001"]


async def test_grouped_projects_buckets_by_consortium(
    client: AsyncClient, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)
    await client.post("/api/projects", json=AHP_PROJECT, headers=headers)
    await client.post(
        "/api/projects",
        json={**AHP_PROJECT, "code": "AHP-NA-001", "consortium": None},
        headers=headers,
    )
    await client.post("/api/projects", json=PRIVATE_PROJECT, headers=headers)

    response = await client.get("/api/projects/grouped", headers=headers)

    assert response.status_code == 200
    body = response.json()
    buckets = {group["consortium"]: [p["code"] for p in group["projects"]] for group in body["ahp"]}
    assert buckets["consortium_1"] == ["AHP-C1-001"]
    assert buckets["consortium_2"] == []
    assert buckets["unassigned"] == ["AHP-NA-001"]
    assert [p["code"] for p in body["private"]] == ["PRV-001"]


async def test_completion_percentage_counts_completed_tasks(
    client: AsyncClient, session: AsyncSession, admin: User, login: LoginHelper
) -> None:
    headers = await login(admin)
    created = (await client.post("/api/projects", json=AHP_PROJECT, headers=headers)).json()
    for index, status in enumerate(
        [TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS, TaskStatus.NOT_STARTED, TaskStatus.COMPLETED]
    ):
        session.add(Task(title=f"Task {index}", project_id=created["id"], status=status))
    await session.commit()

    response = await client.get(f"/api/projects/{created['id']}", headers=headers)

    body = response.json()
    assert body["task_count"] == 4
    assert body["completed_task_count"] == 2
    assert body["completion_percentage"] == 50.0
