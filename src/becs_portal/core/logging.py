"""JSON logging for the portal API.

Every line is one JSON object carrying the service name, environment,
request id and, for authenticated requests, the acting user's id, next to
whatever ``extra`` fields the caller passed (``task_id``, ``project_id``...).
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import current_context

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}
_CONTEXT_ATTRS = ("request_id", "actor_id")


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class PortalContextFilter(logging.Filter):
    """Stamp records with the current request id and acting user.

    An ``actor_id`` passed explicitly through ``extra`` wins over the one
    bound to the request.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = current_context()
        record.request_id = context.request_id
        if getattr(record, "actor_id", None) is None:
            record.actor_id = context.actor_id
        return True


class JsonLogFormatter(logging.Formatter):
    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "environment": self.environment,
            "request_id": getattr(record, "request_id", "-"),
        }
        actor_id = getattr(record, "actor_id", None)
        if actor_id is not None:
            payload["actor_id"] = actor_id

        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key in _CONTEXT_ATTRS:
                continue
            payload[key] = _jsonable(value)

        if record.exc_info and record.exc_info[0] is not None:
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "detail": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(settings: Settings) -> None:
    """Send all portal, uvicorn and SQLAlchemy logging through one JSON handler.

    Uvicorn's own access log is kept at WARNING because
    :class:`~becs_portal.core.middleware.RequestContextMiddleware` writes
    one access line per request with the actor attached.
    """

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.captureWarnings(True)

    quiet_levels = {
        "uvicorn.access": logging.WARNING,
        "sqlalchemy.engine": logging.INFO if settings.db_echo else logging.WARNING,
    }
    loggers: dict[str, dict[str, Any]] = {
        name: {"handlers": ["json"], "level": quiet_levels.get(name, level), "propagate": False}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine")
    }
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonLogFormatter,
                    "service": settings.project_name,
                    "environment": settings.environment,
                }
            },
            "filters": {"portal_context": {"()": PortalContextFilter}},
            "handlers": {
                "json": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "filters": ["portal_context"],
                }
            },
            "root": {"handlers": ["json"], "level": level},
            "loggers": loggers,
        }
    )


__all__ = ["JsonLogFormatter", "PortalContextFilter", "configure_logging"]
