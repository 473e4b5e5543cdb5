from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from becs_portal.core.config import get_settings
from becs_portal.core.logging import PortalContextFilter
from becs_portal.errors import (
    ApplicationError,
    AuthenticationError,
    InvalidStateTransitionError,
    ValidationError,
)
from becs_portal.main import create_app

pytestmark = pytest.mark.asyncio


class ExamplePayload(BaseModel):
    name: str


@pytest.fixture()
def app() -> FastAPI:
    get_settings.cache_clear()
    return create_app()


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def test_application_error_response_schema(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/application")
    async def trigger_application_error() -> None:  # pragma: no cover - defined in test
        raise ApplicationError(
            "Example failure",
            code="example_error",
            status_code=status.HTTP_418_IM_A_TEAPOT,
            details={"foo": "bar"},
        )

    response = await client.get("/error/application")

    assert response.status_code == status.HTTP_418_IM_A_TEAPOT
    request_id = response.headers["X-Request-ID"]
    assert response.json() == {
        "code": "example_error",
        "message": "Example failure",
        "details": {"foo": "bar", "request_id": request_id},
    }


async def test_request_validation_lists_fields(app: FastAPI, client: AsyncClient) -> None:
    @app.post("/error/validation")
    async def create_item(_: ExamplePayload) -> None:  # pragma: no cover - defined in test
        return None

    response = await client.post("/error/validation", json={})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["message"] == "Request validation failed."
    assert payload["details"]["errors"]
    assert "name" in payload["details"]["fields"]
    assert payload["details"]["request_id"] == response.headers["X-Request-ID"]


async def test_business_validation_uses_same_field_map(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/business")
    async def trigger_business_error() -> None:  # pragma: no cover - defined in test
        raise ValidationError("Bad dates.", fields={"end_date": "Must follow start_date."})

    response = await client.get("/error/business")

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["details"]["fields"] == {"end_date": ["Must follow start_date."]}


async def test_state_transition_error_details(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/transition")
    async def trigger_transition_error() -> None:  # pragma: no cover - defined in test
        raise InvalidStateTransitionError("completed", "in_progress")

    response = await client.get("/error/transition")

    assert response.status_code == status.HTTP_409_CONFLICT
    payload = response.json()
    assert payload["code"] == "invalid_state_transition"
    assert payload["details"]["current_status"] == "completed"
    assert payload["details"]["requested_status"] == "in_progress"


async def test_authentication_error_sets_bearer_challenge(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/auth")
    async def trigger_auth_error() -> None:  # pragma: no cover - defined in test
        raise AuthenticationError()

    response = await client.get("/error/auth")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "unauthorized"
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_not_found_error_response_schema(client: AsyncClient) -> None:
    response = await client.get("/error/not-found")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    payload = response.json()
    assert payload["code"] == "not_found"
    assert payload["message"]
    assert payload["details"]["request_id"] == response.headers["X-Request-ID"]


async def test_integrity_error_response_schema(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/database")
    async def trigger_integrity_error() -> None:  # pragma: no cover - defined in test
        raise IntegrityError("statement", {}, Exception("constraint"))

    response = await client.get("/error/database")

    assert response.status_code == status.HTTP_409_CONFLICT
    payload = response.json()
    assert payload["code"] == "db_integrity_error"
    assert payload["message"] == "Database integrity violation."


async def test_unhandled_error_hides_internal_details(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("Sensitive detail")

    response = await client.get("/error/unhandled")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {
        "code": "server_error",
        "message": "Internal server error.",
        "details": {"request_id": response.headers["X-Request-ID"]},
    }
    assert "Sensitive" not in response.text


async def test_incoming_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/healthz", headers={"X-Request-ID": "req-123"})

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["X-Request-ID"] == "req-123"


class _InMemoryHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


async def test_request_id_attached_to_logs(app: FastAPI, client: AsyncClient) -> None:
    logger = logging.getLogger("tests.error_handling")
    handler = _InMemoryHandler()
    handler.addFilter(PortalContextFilter())
    logger.addHandler(handler)
    original_level = logger.level
    logger.setLevel(logging.INFO)

    @app.get("/log")
    async def emit_log() -> dict[str, str]:  # pragma: no cover - defined in test
        logger.info("Log entry")
        return {"status": "ok"}

    try:
        response = await client.get("/log")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(original_level)
        handler.close()

    matching = [record for record in handler.records if record.getMessage() == "Log entry"]
    assert matching
    assert getattr(matching[0], "request_id", None) == response.headers["X-Request-ID"]
