"""Attendance clock-in/out and reporting endpoints."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency, PrivilegedUserDependency
from ...schemas import AttendanceCreate, AttendanceRead, AttendanceSummary, ClockRequest
from ...services import AttendanceService

router = APIRouter(prefix="/attendance", tags=["attendance"])

UserFilter = Annotated[int | None, Query(ge=1, description="Privileged users only.")]
DateFrom = Annotated[date | None, Query(description="First day, inclusive.")]
DateTo = Annotated[date | None, Query(description="Last day, inclusive.")]


@router.post(
    "/clock-in",
    response_model=AttendanceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Clock in for today",
)
async def clock_in(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    payload: ClockRequest | None = None,
) -> AttendanceRead:
    record = await AttendanceService(session).clock_in(current_user, payload.notes if payload else None)
    return AttendanceRead.model_validate(record)


@router.post("/clock-out", response_model=AttendanceRead, summary="Clock out")
async def clock_out(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    payload: ClockRequest | None = None,
) -> AttendanceRead:
    record = await AttendanceService(session).clock_out(current_user, payload.notes if payload else None)
    return AttendanceRead.model_validate(record)


@router.get("", response_model=list[AttendanceRead], summary="List attendance records")
async def list_attendance(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    user_id: UserFilter = None,
    date_from: DateFrom = None,
    date_to: DateTo = None,
) -> list[AttendanceRead]:
    records = await AttendanceService(session).list_records(
        current_user,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
    )
    return [AttendanceRead.model_validate(record) for record in records]


@router.get("/today", response_model=list[AttendanceRead], summary="Today's attendance")
async def today_attendance(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> list[AttendanceRead]:
    records = await AttendanceService(session).today(current_user)
    return [AttendanceRead.model_validate(record) for record in records]


@router.get("/summary", response_model=AttendanceSummary, summary="Hours worked over a range")
async def attendance_summary(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    user_id: UserFilter = None,
    date_from: DateFrom = None,
    date_to: DateTo = None,
) -> AttendanceSummary:
    return await AttendanceService(session).summary(
        current_user,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
    )


@router.post(
    "",
    response_model=AttendanceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record or correct attendance for a user",
)
async def record_attendance(
    payload: AttendanceCreate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> AttendanceRead:
    record = await AttendanceService(session).record_manual(current_user, payload)
    return AttendanceRead.model_validate(record)


@router.get("/{record_id}", response_model=AttendanceRead, summary="Fetch an attendance record")
async def read_attendance(
    record_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> AttendanceRead:
    record = await AttendanceService(session).get_record(current_user, record_id)
    return AttendanceRead.model_validate(record)
