"""Per-request context: the correlation id and, once authenticated, the acting user."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True, slots=True)
class RequestContext:
    request_id: str = "-"
    actor_id: int | None = None


_current: ContextVar[RequestContext] = ContextVar("becs_request_context", default=RequestContext())


def current_context() -> RequestContext:
    return _current.get()


def enter_request(request_id: str) -> Token[RequestContext]:
    """Start a fresh context for ``request_id``; pair with :func:`leave_request`."""
    return _current.set(RequestContext(request_id=request_id))


def leave_request(token: Token[RequestContext]) -> None:
    _current.reset(token)


def set_actor(actor_id: int | None) -> None:
    """Record the authenticated user on the current request's context."""
    _current.set(replace(_current.get(), actor_id=actor_id))


__all__ = [
    "REQUEST_ID_HEADER",
    "RequestContext",
    "current_context",
    "enter_request",
    "leave_request",
    "set_actor",
]
