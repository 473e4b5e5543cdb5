"""Leave application endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency
from ...models import LeaveStatus
from ...schemas import LeaveApplicationCreate, LeaveApplicationRead, LeaveDecision
from ...services import LeaveService

router = APIRouter(prefix="/leave-applications", tags=["leave"])


@router.post(
    "",
    response_model=LeaveApplicationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Apply for leave",
)
async def apply_for_leave(
    payload: LeaveApplicationCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> LeaveApplicationRead:
    application = await LeaveService(session).apply(current_user, payload)
    return LeaveApplicationRead.model_validate(application)


@router.get("", response_model=list[LeaveApplicationRead], summary="List leave applications")
async def list_leave_applications(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    user_id: Annotated[int | None, Query(ge=1)] = None,
    leave_status: Annotated[LeaveStatus | None, Query(alias="status")] = None,
) -> list[LeaveApplicationRead]:
    applications = await LeaveService(session).list_applications(
        current_user,
        user_id=user_id,
        status=leave_status,
    )
    return [LeaveApplicationRead.model_validate(item) for item in applications]


@router.get(
    "/{application_id}",
    response_model=LeaveApplicationRead,
    summary="Fetch a leave application",
)
async def read_leave_application(
    application_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> LeaveApplicationRead:
    application = await LeaveService(session).get_application(current_user, application_id)
    return LeaveApplicationRead.model_validate(application)


@router.post(
    "/{application_id}/decision",
    response_model=LeaveApplicationRead,
    summary="Approve or reject a pending application",
)
async def decide_leave_application(
    application_id: int,
    payload: LeaveDecision,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> LeaveApplicationRead:
    application = await LeaveService(session).decide(current_user, application_id, payload)
    return LeaveApplicationRead.model_validate(application)


@router.post(
    "/{application_id}/cancel",
    response_model=LeaveApplicationRead,
    summary="Cancel a pending application",
)
async def cancel_leave_application(
    application_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> LeaveApplicationRead:
    application = await LeaveService(session).cancel(current_user, application_id)
    return LeaveApplicationRead.model_validate(application)
