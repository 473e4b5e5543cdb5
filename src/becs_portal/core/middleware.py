"""ASGI middleware binding the request context and writing the access log."""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .context import REQUEST_ID_HEADER, current_context, enter_request, leave_request

logger = logging.getLogger("becs_portal.access")


class RequestContextMiddleware:
    """Tag each HTTP request with an id, echo it back and log the outcome.

    An incoming ``X-Request-ID`` is reused so calls can be traced across
    services. The id is also stored on ``request.state`` for the exception
    handlers, which run outside this middleware.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(self.header_name) or uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id
        token = enter_request(request_id)
        started = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message).setdefault(self.header_name, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            logger.info(
                "Request handled",
                extra={
                    "method": scope["method"],
                    "path": scope["path"],
                    "status_code": status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                    "actor_id": current_context().actor_id,
                },
            )
            leave_request(token)


__all__ = ["RequestContextMiddleware"]
