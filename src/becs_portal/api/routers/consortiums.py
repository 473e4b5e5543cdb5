"""Consortium-wide deliverable setup."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency, PrivilegedUserDependency
from ...models import today
from ...schemas import DeliverableBatch, DeliverableBatchResult, TaskRead
from ...services import TaskService

router = APIRouter(prefix="/consortiums", tags=["consortiums"])

ConsortiumNumber = Annotated[int, Path(ge=1, le=5, description="Consortium number (1-5).")]


@router.post(
    "/{number}/deliverables",
    response_model=DeliverableBatchResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create deliverables on every AHP project of a consortium",
)
async def create_deliverables(
    number: ConsortiumNumber,
    payload: DeliverableBatch,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> DeliverableBatchResult:
    consortium, projects, tasks = await TaskService(session).create_consortium_deliverables(
        current_user,
        number,
        payload.deliverables,
    )
    on = today()
    return DeliverableBatchResult(
        consortium=consortium.value,
        project_count=len(projects),
        created=[TaskRead.from_task(task, on) for task in tasks],
    )


@router.get(
    "/{number}/deliverables",
    response_model=list[TaskRead],
    summary="List tasks on a consortium's projects",
)
async def list_deliverables(
    number: ConsortiumNumber,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> list[TaskRead]:
    tasks = await TaskService(session).list_consortium_tasks(current_user, number)
    on = today()
    return [TaskRead.from_task(task, on) for task in tasks]
