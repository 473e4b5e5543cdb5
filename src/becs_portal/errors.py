"""Application-level exception types and handlers."""

from __future__ import annotations

import logging
from contextvars import Token
from http import HTTPStatus
from typing import Any, Iterable, Mapping

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import (
    REQUEST_ID_HEADER,
    RequestContext,
    current_context,
    enter_request,
    leave_request,
)
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for domain-specific errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "application_error",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = message
        self.code = code
        self.status_code = status_code
        self.details = details


class NotFoundError(ApplicationError):
    """Error representing missing resources."""

    def __init__(
        self,
        message: str = "Resource not found.",
        *,
        code: str = "not_found",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class ValidationError(ApplicationError):
    """Error representing business validation failures.

    ``fields`` maps a field name to one or more messages and ends up under
    ``details.fields`` in the response, matching request validation errors.
    """

    def __init__(
        self,
        message: str = "Validation failed.",
        *,
        code: str = "validation_error",
        fields: Mapping[str, str | Iterable[str]] | None = None,
        details: Any | None = None,
    ) -> None:
        if fields:
            details = {**(details or {}), "fields": _as_field_map(fields)}
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class AuthenticationError(ApplicationError):
    """Error raised when credentials are missing or invalid."""

    def __init__(
        self,
        message: str = "Could not validate credentials.",
        *,
        code: str = "unauthorized",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class PermissionDeniedError(ApplicationError):
    """Error raised when the acting user may not perform an operation."""

    def __init__(
        self,
        message: str = "Not enough permissions.",
        *,
        code: str = "forbidden",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class ConflictError(ApplicationError):
    """Error raised when a request clashes with the current resource state."""

    def __init__(
        self,
        message: str = "Request conflicts with the current state.",
        *,
        code: str = "conflict",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class InvalidStateTransitionError(ConflictError):
    """Error raised when a workflow entity cannot move to the requested state."""

    def __init__(
        self,
        current: str,
        target: str | None = None,
        *,
        event: str | None = None,
        message: str | None = None,
    ) -> None:
        if message is None:
            if target is not None:
                message = f"Cannot move from '{current}' to '{target}'."
            else:
                message = f"Action '{event}' is not allowed while status is '{current}'."
        details: dict[str, Any] = {"current_status": current}
        if target is not None:
            details["requested_status"] = target
        if event is not None:
            details["event"] = event
        super().__init__(message, code="invalid_state_transition", details=details)


class PayloadTooLargeError(ApplicationError):
    """Error raised when an upload exceeds the configured size limit."""

    def __init__(
        self,
        max_bytes: int,
        *,
        message: str | None = None,
    ) -> None:
        limit_mb = max_bytes / (1024 * 1024)
        super().__init__(
            message or f"File exceeds the maximum allowed size of {limit_mb:g} MB.",
            code="file_too_large",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            details={"max_bytes": max_bytes},
        )


class DatabaseIntegrityError(ApplicationError):
    """Error representing database integrity violations."""

    def __init__(
        self,
        message: str = "Database integrity violation.",
        *,
        code: str = "db_integrity_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class ServerError(ApplicationError):
    """Error representing unexpected server failures."""

    def __init__(
        self,
        message: str = "Internal server error.",
        *,
        code: str = "server_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: "file_too_large",
}


def _as_field_map(fields: Mapping[str, str | Iterable[str]]) -> dict[str, list[str]]:
    result: dict[str, list[str]] = {}
    for name, messages in fields.items():
        if isinstance(messages, str):
            result[name] = [messages]
        else:
            result[name] = [str(message) for message in messages]
    return result


def field_errors(errors: Iterable[Mapping[str, Any]]) -> dict[str, list[str]]:
    """Collapse pydantic error entries into a ``{field: [messages]}`` map."""

    fields: dict[str, list[str]] = {}
    for error in errors:
        location = [str(part) for part in error.get("loc", ())]
        if location and location[0] in {"body", "query", "path", "header", "form"}:
            location = location[1:]
        key = ".".join(location) or "__root__"
        fields.setdefault(key, []).append(str(error.get("msg", "Invalid value.")))
    return fields


def _bind_request_context(request: Request) -> Token[RequestContext] | None:
    # Handlers for unhandled errors run outside the request middleware.
    request_id = getattr(request.state, "request_id", None)
    if not request_id or current_context().request_id == request_id:
        return None
    return enter_request(request_id)


def _reset_request_context(token: Token[RequestContext] | None) -> None:
    if token is not None:
        leave_request(token)


def _normalize_details(raw: Any) -> Any | None:
    if raw is None:
        return None
    if isinstance(raw, list):
        return {"errors": raw}
    return raw


def _merge_details_with_request(request: Request, details: Any | None) -> Any | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        if "request_id" not in details:
            return {**details, "request_id": request_id}
        return details
    return {"request_id": request_id, "detail": details}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        code=code,
        message=message,
        details=_merge_details_with_request(request, details),
    )
    response = JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))
    if headers:
        response.headers.update(headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _http_exception_details(
    status_code: int,
    detail: Any,
) -> tuple[str, Any | None]:
    if isinstance(detail, str):
        return detail, None
    try:
        status_phrase = HTTPStatus(status_code).phrase
    except ValueError:
        status_phrase = "Error"
    if detail is None:
        return status_phrase, None
    return status_phrase, _normalize_details(detail)


def _jsonable_errors(errors: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    cleaned: list[dict[str, Any]] = []
    for error in errors:
        item = {key: value for key, value in error.items() if key in {"type", "loc", "msg", "input"}}
        if "input" in item and not isinstance(item["input"], (str, int, float, bool, type(None), list, dict)):
            item["input"] = str(item["input"])
        cleaned.append(item)
    return cleaned


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(
        request: Request,
        exc: ApplicationError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "Application error encountered",
                extra={"code": exc.code, "status_code": exc.status_code},
            )
            headers = None
            if exc.status_code == status.HTTP_401_UNAUTHORIZED:
                headers = {"WWW-Authenticate": "Bearer"}
            return _error_response(
                request,
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
                details=exc.details,
                headers=headers,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            errors = _jsonable_errors(exc.errors())
            logger.warning(
                "Request validation failed",
                extra={"errors": errors},
            )
            return _error_response(
                request,
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                code="validation_error",
                message="Request validation failed.",
                details={"errors": errors, "fields": field_errors(errors)},
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(IntegrityError)
    async def _handle_integrity_error(
        request: Request,
        exc: IntegrityError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.error("Database integrity error encountered.", exc_info=exc)
            return _error_response(
                request,
                status_code=status.HTTP_409_CONFLICT,
                code="db_integrity_error",
                message="Database integrity violation.",
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            code = _HTTP_STATUS_CODE_MAP.get(exc.status_code, "http_error")
            message, extra_details = _http_exception_details(exc.status_code, exc.detail)
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "HTTP exception raised",
                extra={"code": code, "status_code": exc.status_code, "path": str(request.url.path)},
            )
            headers = exc.headers or None
            return _error_response(
                request,
                status_code=exc.status_code,
                code=code,
                message=message,
                details=extra_details,
                headers=headers,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.exception("Unhandled application error.")
            return _error_response(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                code="server_error",
                message="Internal server error.",
            )
        finally:
            _reset_request_context(token)


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "ConflictError",
    "DatabaseIntegrityError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "PayloadTooLargeError",
    "PermissionDeniedError",
    "ServerError",
    "ValidationError",
    "field_errors",
    "register_exception_handlers",
]
