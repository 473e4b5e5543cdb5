from __future__ import annotations

import pytest
from httpx import AsyncClient

from becs_portal.core.storage import FileStorage
from becs_portal.models import User

from ..conftest import TEST_UPLOAD_LIMIT, LoginHelper

pytestmark = pytest.mark.asyncio


async def _upload(
    client: AsyncClient,
    headers: dict[str, str],
    *,
    name: str = "Inception Report",
    category: str = "Reports",
    description: str | None = "Standard inception layout",
    content: bytes = b"template body",
    filename: str = "inception.docx",
):
    data = {"name": name, "category": category}
    if description is not None:
        data["description"] = description
    return await client.post(
        "/api/templates/upload",
        data=data,
        files={"file": (filename, content, "application/msword")},
        headers=headers,
    )


async def test_upload_list_download_and_delete(
    client: AsyncClient, admin: User, staff: User, storage: FileStorage, login: LoginHelper
) -> None:
    headers = await login(admin)

    uploaded = await _upload(client, headers)
    assert uploaded.status_code == 201
    template = uploaded.json()
    assert template["category"] == "reports"
    assert template["file_name"] == "inception.docx"
    assert template["file_size"] == len(b"template body")
    assert template["uploaded_by_id"] == admin.id

    staff_headers = await login(staff)
    download = await client.get(f"/api/templates/{template['id']}/download", headers=staff_headers)
    assert download.status_code == 200
    assert download.content == b"template body"

    stored = list(storage.root.rglob("*.docx"))
    assert len(stored) == 1

    forbidden = await client.delete(f"/api/templates/{template['id']}", headers=staff_headers)
    assert forbidden.status_code == 403

    deleted = await client.delete(f"/api/templates/{template['id']}", headers=headers)
    assert deleted.status_code == 204
    assert not stored[0].exists()
    missing = await client.get(f"/api/templates/{template['id']}", headers=headers)
    assert missing.status_code == 404


async def test_search_and_categories(client: AsyncClient, admin: User, login: LoginHelper) -> None:
    headers = await login(admin)
    await _upload(client, headers)
    await _upload(client, headers, name="Timesheet", category="HR", description=None, filename="time.xlsx")
    await _upload(client, headers, name="Leave form", category="hr", description="Annual leave request")

    hr = await client.get("/api/templates", params={"category": "HR"}, headers=headers)
    assert {item["name"] for item in hr.json()} == {"Timesheet", "Leave form"}

    search = await client.get("/api/templates", params={"search": "LEAVE"}, headers=headers)
    assert [item["name"] for item in search.json()] == ["Leave form"]

    by_category_text = await client.get("/api/templates", params={"search": "report"}, headers=headers)
    assert [item["name"] for item in by_category_text.json()] == ["Inception Report"]

    categories = await client.get("/api/templates/categories", headers=headers)
    assert categories.json() == [{"name": "hr", "count": 2}, {"name": "reports", "count": 1}]


async def test_upload_validation(client: AsyncClient, admin: User, staff: User, login: LoginHelper) -> None:
    headers = await login(admin)

    missing_name = await _upload(client, headers, name=" ")
    assert missing_name.status_code == 422
    assert "name" in missing_name.json()["details"]["fields"]

    too_large = await _upload(client, headers, content=b"x" * (TEST_UPLOAD_LIMIT + 1))
    assert too_large.status_code == 413

    no_file = await client.post(
        "/api/templates/upload",
        data={"name": "Empty", "category": "misc"},
        headers=headers,
    )
    assert no_file.status_code == 422

    by_staff = await _upload(client, await login(staff))
    assert by_staff.status_code == 403
