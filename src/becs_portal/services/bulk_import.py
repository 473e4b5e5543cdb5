"""CSV bulk import for staff, projects, tasks and attendance.

Rows are parsed with :mod:`csv`, validated with the same schemas the
single-record endpoints use and created one at a time through the regular
services, so every business rule applies unchanged. A bad row is reported
and skipped; it never aborts the rows around it.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ApplicationError, ValidationError
from ..models import Consortium, ProjectStatus, ProjectType, TaskPriority, User, UserRole
from ..repositories import ProjectRepository, UserRepository
from ..schemas import (
    AttendanceCreate,
    BulkImportResult,
    BulkImportRowError,
    ImportType,
    ProjectCreate,
    TaskCreate,
    UserCreate,
)
from .attendance import AttendanceService
from .projects import ProjectService
from .tasks import TaskService
from .users import UserService

logger = logging.getLogger(__name__)

EnumType = TypeVar("EnumType", bound=Enum)


@dataclass(frozen=True, slots=True)
class CsvLayout:
    """Column layout of one import type."""

    columns: tuple[str, ...]
    required: frozenset[str]
    example: tuple[str, ...]


LAYOUTS: dict[ImportType, CsvLayout] = {
    ImportType.STAFF: CsvLayout(
        columns=(
            "first_name",
            "last_name",
            "email",
            "staff_id",
            "role",
            "department",
            "position",
            "phone_number",
            "password",
        ),
        required=frozenset({"first_name", "last_name", "email", "password"}),
        example=(
            "Amina",
            "Otieno",
            "amina.otieno@example.com",
            "BECS-007",
            "staff",
            "Health Economics",
            "Analyst",
            "+254700000007",
            "change-me-123",
        ),
    ),
    ImportType.PROJECTS: CsvLayout(
        columns=(
            "name",
            "code",
            "type",
            "consortium",
            "description",
            "status",
            "start_date",
            "end_date",
            "client_name",
        ),
        required=frozenset({"name", "code", "type"}),
        example=(
            "County Health Financing Review",
            "AHP-C1-001",
            "AHP",
            "consortium_1",
            "Quarterly review of county health financing.",
            "active",
            "2024-01-15",
            "2024-12-20",
            "Ministry of Health",
        ),
    ),
    ImportType.TASKS: CsvLayout(
        columns=(
            "title",
            "description",
            "assigned_to",
            "reviewer",
            "project_code",
            "priority",
            "target_date",
            "is_weekly_deliverable",
        ),
        required=frozenset({"title", "project_code"}),
        example=(
            "Draft Report",
            "First draft of the quarterly report.",
            "BECS-007",
            "director@example.com",
            "AHP-C1-001",
            "high",
            "2024-03-29",
            "yes",
        ),
    ),
    ImportType.ATTENDANCE: CsvLayout(
        columns=("user_id", "date", "time_in", "time_out", "notes"),
        required=frozenset({"user_id", "date", "time_in"}),
        example=("BECS-007", "2024-03-25", "08:30", "17:00", ""),
    ),
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_WORD = re.compile(r"[^a-z0-9]+")
_HEADER_ALIASES = {
    "assignee": "assigned_to",
    "assignee_id": "assigned_to",
    "target_completion_date": "target_date",
    "user": "user_id",
    "staff": "user_id",
    "work_date": "date",
}
_TRUE_VALUES = frozenset({"1", "true", "yes", "y"})
_FALSE_VALUES = frozenset({"", "0", "false", "no", "n"})


class RowError(Exception):
    """Problem with a single CSV row."""


def normalise_header(name: str) -> str:
    """``firstName`` / ``First Name`` / ``first-name`` all become ``first_name``."""
    snake = _CAMEL_BOUNDARY.sub("_", name.strip())
    key = _NON_WORD.sub("_", snake.lower()).strip("_")
    return _HEADER_ALIASES.get(key, key)


def generate_template(import_type: ImportType) -> str:
    """Return a CSV template with the header row and one example row."""
    layout = LAYOUTS[import_type]
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(layout.columns)
    writer.writerow(layout.example)
    return output.getvalue()


def parse_csv(import_type: ImportType, content: str) -> list[dict[str, str]]:
    """Parse ``content`` into normalised row dicts, checking required headers."""
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    fieldnames = reader.fieldnames or []
    headers = {normalise_header(name) for name in fieldnames if name}
    missing = sorted(LAYOUTS[import_type].required - headers)
    if missing:
        raise ValidationError(
            "CSV is missing required columns.",
            fields={"csv_data": f"Missing required columns: {', '.join(missing)}."},
            details={"found_columns": list(fieldnames)},
        )
    rows: list[dict[str, str]] = []
    for raw in reader:
        row = {
            normalise_header(key): (value or "").strip()
            for key, value in raw.items()
            if key is not None and not isinstance(value, list)
        }
        if any(row.values()):
            rows.append(row)
    return rows


def _optional(row: dict[str, str], key: str) -> str | None:
    value = row.get(key, "")
    return value or None


def _match_enum(enum_cls: type[EnumType], value: str, column: str) -> EnumType:
    lowered = value.strip().lower().replace(" ", "_").replace("-", "_")
    for member in enum_cls:
        if member.value.lower() == lowered or member.name.lower() == lowered:
            return member
    allowed = ", ".join(member.value for member in enum_cls)
    raise RowError(f"Invalid {column} {value!r}; expected one of: {allowed}.")


def _parse_consortium(value: str) -> Consortium | None:
    if not value:
        return None
    digits = re.sub(r"\D", "", value)
    if digits and len(digits) == 1:
        try:
            return Consortium.from_number(int(digits))
        except ValueError:
            pass
    return _match_enum(Consortium, value, "consortium")


def _parse_bool(value: str, column: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise RowError(f"Invalid {column} {value!r}; expected yes or no.")


def _parse_date(value: str, column: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise RowError(f"Invalid {column} {value!r}; expected YYYY-MM-DD.") from None


def _parse_instant(day: date, value: str, column: str) -> datetime:
    """Accept ``HH:MM[:SS]`` on ``day`` or a full ISO timestamp; naive means UTC."""
    try:
        parsed = datetime.combine(day, time.fromisoformat(value))
    except ValueError:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise RowError(f"Invalid {column} {value!r}; expected HH:MM or an ISO timestamp.") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid value.")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


class BulkImportService:
    """Create many records from CSV text on behalf of a privileged user."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepository(session)
        self._projects = ProjectRepository(session)
        self._user_service = UserService(session)
        self._project_service = ProjectService(session)
        self._task_service = TaskService(session)
        self._attendance_service = AttendanceService(session)

    async def run(self, actor: User, import_type: ImportType, csv_data: str) -> BulkImportResult:
        rows = parse_csv(import_type, csv_data)
        handlers: dict[ImportType, Callable[[User, dict[str, str]], Awaitable[Any]]] = {
            ImportType.STAFF: self._import_staff,
            ImportType.PROJECTS: self._import_project,
            ImportType.TASKS: self._import_task,
            ImportType.ATTENDANCE: self._import_attendance,
        }
        handler = handlers[import_type]
        created = 0
        errors: list[BulkImportRowError] = []
        for number, row in enumerate(rows, start=1):
            try:
                await handler(actor, row)
            except RowError as exc:
                errors.append(BulkImportRowError(row=number, message=str(exc)))
            except PydanticValidationError as exc:
                errors.append(BulkImportRowError(row=number, message=_describe(exc)))
            except ApplicationError as exc:
                errors.append(BulkImportRowError(row=number, message=exc.message))
            else:
                created += 1
        logger.info(
            "Bulk import finished",
            extra={
                "import_type": import_type.value,
                "total_rows": len(rows),
                "created": created,
                "failed": len(errors),
                "actor_id": actor.id,
            },
        )
        return BulkImportResult(
            type=import_type,
            total_rows=len(rows),
            created=created,
            errors=errors,
        )

    async def _resolve_user(self, reference: str, column: str) -> User:
        user = None
        if reference.isdigit():
            user = await self._users.get(int(reference))
        if user is None:
            user = await self._users.get_by_reference(reference)
        if user is None:
            raise RowError(f"Unknown user {reference!r} in {column}.")
        return user

    async def _import_staff(self, actor: User, row: dict[str, str]) -> None:
        role = _match_enum(UserRole, row["role"], "role") if row.get("role") else UserRole.STAFF
        payload = UserCreate(
            email=row.get("email", ""),
            password=row.get("password", ""),
            first_name=row.get("first_name", ""),
            last_name=row.get("last_name", ""),
            staff_id=_optional(row, "staff_id"),
            role=role,
            department=_optional(row, "department"),
            position=_optional(row, "position"),
            phone_number=_optional(row, "phone_number"),
        )
        await self._user_service.create_user(payload)

    async def _import_project(self, actor: User, row: dict[str, str]) -> None:
        payload = ProjectCreate(
            name=row.get("name", ""),
            code=row.get("code", ""),
            type=_match_enum(ProjectType, row.get("type", ""), "type"),
            consortium=_parse_consortium(row.get("consortium", "")),
            status=_match_enum(ProjectStatus, row["status"], "status") if row.get("status") else ProjectStatus.ACTIVE,
            description=_optional(row, "description"),
            client_name=_optional(row, "client_name"),
            start_date=_parse_date(row["start_date"], "start_date") if row.get("start_date") else None,
            end_date=_parse_date(row["end_date"], "end_date") if row.get("end_date") else None,
        )
        await self._project_service.create_project(actor, payload)

    async def _import_task(self, actor: User, row: dict[str, str]) -> None:
        project = await self._projects.get_by_code(row.get("project_code", ""))
        if project is None:
            raise RowError(f"Unknown project code {row.get('project_code')!r}.")
        assignee = await self._resolve_user(row["assigned_to"], "assigned_to") if row.get("assigned_to") else None
        reviewer = await self._resolve_user(row["reviewer"], "reviewer") if row.get("reviewer") else None
        payload = TaskCreate(
            title=row.get("title", ""),
            description=_optional(row, "description"),
            project_id=project.id,
            assignee_id=assignee.id if assignee else None,
            reviewer_id=reviewer.id if reviewer else None,
            priority=_match_enum(TaskPriority, row["priority"], "priority") if row.get("priority") else TaskPriority.MEDIUM,
            target_completion_date=_parse_date(row["target_date"], "target_date") if row.get("target_date") else None,
            is_weekly_deliverable=_parse_bool(row.get("is_weekly_deliverable", ""), "is_weekly_deliverable"),
        )
        await self._task_service.create_task(actor, payload)

    async def _import_attendance(self, actor: User, row: dict[str, str]) -> None:
        user = await self._resolve_user(row.get("user_id", ""), "user_id")
        day = _parse_date(row.get("date", ""), "date")
        payload = AttendanceCreate(
            user_id=user.id,
            work_date=day,
            time_in=_parse_instant(day, row.get("time_in", ""), "time_in"),
            time_out=_parse_instant(day, row["time_out"], "time_out") if row.get("time_out") else None,
            notes=_optional(row, "notes"),
        )
        await self._attendance_service.record_manual(actor, payload)


__all__ = [
    "LAYOUTS",
    "BulkImportService",
    "CsvLayout",
    "generate_template",
    "normalise_header",
    "parse_csv",
]
