from __future__ import annotations

import logging

import pytest
from httpx import AsyncClient

from becs_portal.models import User

from ..conftest import LoginHelper

pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


async def test_metadata_describes_the_service(client: AsyncClient) -> None:
    response = await client.get("/api/metadata")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "BECS Portal"
    assert body["environment"] == "test"
    assert body["api_prefix"] == "/api"


async def test_openapi_lists_portal_routes(client: AsyncClient) -> None:
    paths = (await client.get("/api/openapi.json")).json()["paths"]

    for path in (
        "/api/auth/login",
        "/api/tasks/{task_id}/reviews",
        "/api/consortiums/{number}/deliverables",
        "/api/bulk-import",
        "/api/dashboard/stats",
    ):
        assert path in paths


async def test_access_log_records_status_and_actor(
    client: AsyncClient, staff: User, login: LoginHelper, caplog: pytest.LogCaptureFixture
) -> None:
    headers = await login(staff)
    caplog.set_level(logging.INFO, logger="becs_portal.access")

    await client.get("/api/auth/user", headers=headers)
    await client.get("/api/projects/999999", headers=headers)

    handled = [record for record in caplog.records if record.name == "becs_portal.access"]
    assert [(record.path, record.status_code) for record in handled] == [
        ("/api/auth/user", 200),
        ("/api/projects/999999", 404),
    ]
    assert all(record.actor_id == staff.id for record in handled)
