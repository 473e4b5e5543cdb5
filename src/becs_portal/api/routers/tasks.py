"""Task workflow endpoints: CRUD, status changes, submissions and reviews."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse

from ...deps import (
    CurrentUserDependency,
    DatabaseSessionDependency,
    FileStorageDependency,
    PrivilegedUserDependency,
)
from ...models import TaskPriority, today
from ...schemas import (
    ReviewCreate,
    ReviewOutcome,
    ReviewRead,
    TaskCreate,
    TaskListResponse,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from ...schemas.task import TASK_STATUS_FILTER_VALUES
from ...services import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])

STATUS_FILTER_HELP = f"One of: {', '.join(TASK_STATUS_FILTER_VALUES)}."


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    payload: TaskCreate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> TaskRead:
    task = await TaskService(session).create_task(current_user, payload)
    return TaskRead.from_task(task, today())


@router.get("", response_model=TaskListResponse, summary="List tasks visible to the caller")
async def list_tasks(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    project_id: Annotated[int | None, Query(ge=1)] = None,
    assignee_id: Annotated[int | None, Query(ge=1)] = None,
    reviewer_id: Annotated[int | None, Query(ge=1)] = None,
    status_filter: Annotated[str | None, Query(alias="status", description=STATUS_FILTER_HELP)] = None,
    priority: Annotated[TaskPriority | None, Query()] = None,
    is_weekly_deliverable: Annotated[bool | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> TaskListResponse:
    on = today()
    tasks, total = await TaskService(session).list_tasks(
        current_user,
        project_id=project_id,
        assignee_id=assignee_id,
        reviewer_id=reviewer_id,
        status=status_filter,
        priority=priority,
        is_weekly_deliverable=is_weekly_deliverable,
        limit=limit,
        offset=offset,
        on=on,
    )
    return TaskListResponse(
        items=[TaskRead.from_task(task, on) for task in tasks],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{task_id}", response_model=TaskRead, summary="Fetch a task")
async def read_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    task = await TaskService(session).get_task(current_user, task_id)
    return TaskRead.from_task(task, today())


@router.patch("/{task_id}", response_model=TaskRead, summary="Edit task details")
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> TaskRead:
    task = await TaskService(session).update_task(current_user, task_id, payload)
    return TaskRead.from_task(task, today())


@router.post("/{task_id}/status", response_model=TaskRead, summary="Change a task's status")
async def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    task = await TaskService(session).update_status(current_user, task_id, payload.status)
    return TaskRead.from_task(task, today())


@router.post("/{task_id}/upload", response_model=TaskRead, summary="Submit a deliverable file")
async def upload_task_file(
    task_id: int,
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    current_user: CurrentUserDependency,
    file: UploadFile | None = File(None),
    notes: str | None = Form(None),
) -> TaskRead:
    task = await TaskService(session, storage).submit_file(current_user, task_id, file, notes)
    return TaskRead.from_task(task, today())


@router.get("/{task_id}/download", summary="Download the submitted file")
async def download_task_file(
    task_id: int,
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    current_user: CurrentUserDependency,
) -> FileResponse:
    download = await TaskService(session, storage).get_download(current_user, task_id)
    return FileResponse(
        download.path,
        filename=download.filename,
        media_type=download.content_type or "application/octet-stream",
    )


@router.post(
    "/{task_id}/reviews",
    response_model=ReviewOutcome,
    status_code=status.HTTP_201_CREATED,
    summary="Review a submitted task",
)
async def review_task(
    task_id: int,
    payload: ReviewCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ReviewOutcome:
    review, task = await TaskService(session).review_task(
        current_user,
        task_id,
        payload.decision,
        payload.comments,
    )
    return ReviewOutcome(
        review=ReviewRead.model_validate(review),
        task=TaskRead.from_task(task, today()),
    )


@router.get("/{task_id}/reviews", response_model=list[ReviewRead], summary="Review history")
async def list_task_reviews(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> list[ReviewRead]:
    reviews = await TaskService(session).list_reviews(current_user, task_id)
    return [ReviewRead.model_validate(review) for review in reviews]
