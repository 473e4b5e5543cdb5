"""Service layer encapsulating the task/review workflow."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Sequence

from fastapi import UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.storage import FileDownload, FileStorage, StoredFile
from ..errors import InvalidStateTransitionError, NotFoundError, PermissionDeniedError, ValidationError
from ..models import (
    OVERDUE,
    Consortium,
    Project,
    Review,
    ReviewDecision,
    Task,
    TaskPriority,
    TaskStatus,
    User,
    today,
    utcnow,
)
from ..repositories import ProjectRepository, ReviewRepository, TaskFilters, TaskRepository, UserRepository
from ..schemas import DeliverableItem, TaskCreate, TaskUpdate
from .workflow import REVIEW_EVENTS, REVIEWER_EVENTS, TaskEvent, apply_transition, can_apply, event_for_manual_change

logger = logging.getLogger(__name__)

TASK_UPLOAD_NAMESPACE = "tasks"


def parse_status_filter(value: str | None) -> tuple[TaskStatus | None, bool]:
    """Split a list filter into a stored status or the derived ``overdue`` flag."""

    if value is None or not value.strip():
        return None, False
    if value.strip().lower() == OVERDUE:
        return None, True
    try:
        return TaskStatus(value), False
    except ValueError:
        allowed = ", ".join([*(member.value for member in TaskStatus), OVERDUE])
        raise ValidationError(
            "Unknown task status filter.",
            fields={"status": f"Must be one of: {allowed}."},
        ) from None


class TaskService:
    """High-level business orchestration for ``Task`` entities."""

    def __init__(self, session: AsyncSession, storage: FileStorage | None = None) -> None:
        self._session = session
        self._storage = storage
        self._repository = TaskRepository(session)
        self._reviews = ReviewRepository(session)
        self._users = UserRepository(session)
        self._projects = ProjectRepository(session)

    def _require_storage(self) -> FileStorage:
        if self._storage is None:  # pragma: no cover - wiring error
            raise RuntimeError("TaskService was created without file storage.")
        return self._storage

    async def _get_or_404(self, task_id: int) -> Task:
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} does not exist.")
        return task

    @staticmethod
    def _can_view(actor: User, task: Task) -> bool:
        return actor.is_privileged or actor.id in (task.assignee_id, task.reviewer_id)

    async def _validate_references(
        self,
        *,
        project_id: int | None,
        assignee_id: int | None,
        reviewer_id: int | None,
    ) -> None:
        """Check project, assignee and reviewer before anything is written."""

        fields: dict[str, str] = {}
        if project_id is not None:
            project = await self._projects.get(project_id)
            if project is None:
                fields["project_id"] = f"Project {project_id} does not exist."
            elif project.is_archived:
                fields["project_id"] = f"Project {project.code} is archived."
        if assignee_id is not None:
            assignee = await self._users.get(assignee_id)
            if assignee is None:
                fields["assignee_id"] = f"User {assignee_id} does not exist."
            elif not assignee.is_active:
                fields["assignee_id"] = "Assignee account is inactive."
        if reviewer_id is not None:
            reviewer = await self._users.get(reviewer_id)
            if reviewer is None:
                fields["reviewer_id"] = f"User {reviewer_id} does not exist."
            elif not reviewer.is_active:
                fields["reviewer_id"] = "Reviewer account is inactive."
            elif not reviewer.is_privileged:
                fields["reviewer_id"] = "Reviewer must be an admin or director."
        if fields:
            raise ValidationError("Task references are invalid.", fields=fields)

    def _require_privileged(self, actor: User, action: str) -> None:
        if not actor.is_privileged:
            raise PermissionDeniedError(f"Only admins and directors may {action}.")

    async def create_task(self, actor: User, payload: TaskCreate) -> Task:
        """Create a task in ``not_started``; privileged users only."""
        self._require_privileged(actor, "create tasks")
        await self._validate_references(
            project_id=payload.project_id,
            assignee_id=payload.assignee_id,
            reviewer_id=payload.reviewer_id,
        )
        task = Task(
            **payload.model_dump(),
            status=TaskStatus.NOT_STARTED,
            created_by_id=actor.id,
        )
        await self._repository.add(task)
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info(
            "Task created",
            extra={"task_id": task.id, "project_id": task.project_id, "actor_id": actor.id},
        )
        return task

    async def get_task(self, actor: User, task_id: int) -> Task:
        task = await self._get_or_404(task_id)
        if not self._can_view(actor, task):
            raise PermissionDeniedError("You are not involved in this task.")
        return task

    async def list_tasks(
        self,
        actor: User,
        *,
        project_id: int | None = None,
        assignee_id: int | None = None,
        reviewer_id: int | None = None,
        status: str | None = None,
        priority: TaskPriority | None = None,
        is_weekly_deliverable: bool | None = None,
        limit: int = 20,
        offset: int = 0,
        on: date | None = None,
    ) -> tuple[list[Task], int]:
        """Return tasks visible to ``actor`` matching the filters."""
        stored_status, overdue = parse_status_filter(status)
        filters = TaskFilters(
            visible_to_user_id=None if actor.is_privileged else actor.id,
            project_id=project_id,
            assignee_id=assignee_id,
            reviewer_id=reviewer_id,
            status=stored_status,
            overdue_on=(on or today()) if overdue else None,
            priority=priority,
            is_weekly_deliverable=is_weekly_deliverable,
        )
        return await self._repository.list_paginated(filters, limit=limit, offset=offset)

    async def update_task(self, actor: User, task_id: int, payload: TaskUpdate) -> Task:
        self._require_privileged(actor, "edit tasks")
        task = await self._get_or_404(task_id)
        updates = payload.model_dump(exclude_unset=True)
        if "title" in updates and updates["title"] is None:
            raise ValidationError("Title cannot be empty.", fields={"title": "Title cannot be empty."})
        if "project_id" in updates and updates["project_id"] is None:
            raise ValidationError("A task must belong to a project.", fields={"project_id": "Required."})
        await self._validate_references(
            project_id=updates.get("project_id") if updates.get("project_id") != task.project_id else None,
            assignee_id=updates.get("assignee_id"),
            reviewer_id=updates.get("reviewer_id"),
        )
        for field_name, value in updates.items():
            setattr(task, field_name, value)
        await self._session.commit()
        await self._repository.refresh(task)
        return task

    def _check_actor_for_event(self, actor: User, task: Task, event: TaskEvent) -> None:
        if actor.is_privileged:
            return
        if event in REVIEWER_EVENTS:
            if actor.id != task.reviewer_id:
                raise PermissionDeniedError("Only the task's reviewer may do this.")
        elif actor.id != task.assignee_id:
            raise PermissionDeniedError("Only the task's assignee may do this.")

    async def update_status(self, actor: User, task_id: int, target: TaskStatus) -> Task:
        """Apply a manual status change through the transition table."""
        task = await self._get_or_404(task_id)
        if not self._can_view(actor, task):
            raise PermissionDeniedError("You are not involved in this task.")
        event = event_for_manual_change(task.status, target)
        if event is None:
            return task
        self._check_actor_for_event(actor, task, event)
        previous = apply_transition(task, event)
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info(
            "Task status changed",
            extra={
                "task_id": task.id,
                "from_status": previous.value,
                "to_status": task.status.value,
                "actor_id": actor.id,
            },
        )
        return task

    async def submit_file(
        self,
        actor: User,
        task_id: int,
        upload: UploadFile | None,
        notes: str | None = None,
    ) -> Task:
        """Attach the assignee's deliverable and move the task to ``submitted``."""
        storage = self._require_storage()
        task = await self._get_or_404(task_id)
        if actor.id != task.assignee_id:
            raise PermissionDeniedError("Only the task's assignee may upload a submission.")
        if not can_apply(task.status, TaskEvent.SUBMIT):
            raise InvalidStateTransitionError(
                task.status.value,
                event=TaskEvent.SUBMIT.value,
                message="Completed tasks cannot receive new submissions.",
            )

        stored: StoredFile = await storage.save(upload, namespace=f"{TASK_UPLOAD_NAMESPACE}/{task.id}")
        previous_key = task.file_key
        now = utcnow()
        previous_status = apply_transition(task, TaskEvent.SUBMIT, at=now)
        task.file_name = stored.original_name
        task.file_key = stored.key
        task.file_size = stored.size
        task.file_content_type = stored.content_type
        task.submission_notes = notes.strip() if notes and notes.strip() else None
        task.uploaded_at = now
        try:
            await self._session.commit()
        except Exception:
            storage.delete(stored.key)
            raise
        if previous_key and previous_key != stored.key:
            storage.delete(previous_key)
        await self._repository.refresh(task)
        logger.info(
            "Task submitted",
            extra={
                "task_id": task.id,
                "from_status": previous_status.value,
                "file_size": stored.size,
                "actor_id": actor.id,
            },
        )
        return task

    async def review_task(
        self,
        actor: User,
        task_id: int,
        decision: ReviewDecision,
        comments: str,
    ) -> tuple[Review, Task]:
        """Record a review and move the task according to the decision."""
        task = await self._get_or_404(task_id)
        if not (actor.is_privileged or actor.id == task.reviewer_id):
            raise PermissionDeniedError("Only the task's reviewer may review it.")
        event = REVIEW_EVENTS[decision]
        if not can_apply(task.status, event):
            raise InvalidStateTransitionError(
                task.status.value,
                event=event.value,
                message="Only submitted tasks can be reviewed.",
            )
        cleaned = (comments or "").strip()
        if not cleaned:
            raise ValidationError(
                "Review comments are required.",
                fields={"comments": "Review comments are required."},
            )

        now = utcnow()
        apply_transition(task, event, at=now)
        review = Review(
            task_id=task.id,
            reviewer_id=actor.id,
            decision=decision,
            comments=cleaned,
            created_at=now,
        )
        await self._reviews.add(review)
        await self._session.commit()
        await self._repository.refresh(task)
        await self._reviews.refresh(review)
        logger.info(
            "Task reviewed",
            extra={
                "task_id": task.id,
                "decision": decision.value,
                "to_status": task.status.value,
                "actor_id": actor.id,
            },
        )
        return review, task

    async def list_reviews(self, actor: User, task_id: int) -> list[Review]:
        await self.get_task(actor, task_id)
        return await self._reviews.list_for_task(task_id)

    async def get_download(self, actor: User, task_id: int) -> FileDownload:
        """Resolve the attached file for the reviewer, assignee or a privileged user."""
        task = await self._get_or_404(task_id)
        if not self._can_view(actor, task):
            raise PermissionDeniedError("You may not download this task's file.")
        if not task.file_key:
            raise NotFoundError("No file has been uploaded for this task.")
        path = self._require_storage().resolve(task.file_key)
        return FileDownload(
            path=path,
            filename=task.file_name or path.name,
            content_type=task.file_content_type,
        )

    async def _consortium_projects(self, number: int) -> tuple[Consortium, list[Project]]:
        try:
            consortium = Consortium.from_number(number)
        except ValueError:
            raise NotFoundError(f"Consortium {number} does not exist.") from None
        projects = await self._projects.list_for_consortium(consortium)
        return consortium, projects

    async def create_consortium_deliverables(
        self,
        actor: User,
        number: int,
        items: Sequence[DeliverableItem],
    ) -> tuple[Consortium, list[Project], list[Task]]:
        """Create one task per deliverable on every live AHP project of the consortium."""
        self._require_privileged(actor, "set up consortium deliverables")
        if not items:
            raise ValidationError(
                "At least one deliverable is required.",
                fields={"deliverables": "At least one deliverable is required."},
            )
        blank = {
            f"deliverables.{index}.title": "Title cannot be empty."
            for index, item in enumerate(items)
            if not item.title
        }
        if blank:
            raise ValidationError("Deliverable titles cannot be empty.", fields=blank)
        consortium, projects = await self._consortium_projects(number)
        if not projects:
            raise NotFoundError(f"Consortium {number} has no active AHP projects.")
        for item in items:
            await self._validate_references(
                project_id=None,
                assignee_id=item.assignee_id,
                reviewer_id=item.reviewer_id,
            )

        created: list[Task] = []
        for project in projects:
            for item in items:
                values: dict[str, Any] = item.model_dump()
                task = Task(
                    **values,
                    project_id=project.id,
                    status=TaskStatus.NOT_STARTED,
                    created_by_id=actor.id,
                )
                self._session.add(task)
                created.append(task)
        await self._session.flush()
        await self._session.commit()
        for task in created:
            await self._repository.refresh(task)
        logger.info(
            "Consortium deliverables created",
            extra={
                "consortium": consortium.value,
                "project_count": len(projects),
                "task_count": len(created),
                "actor_id": actor.id,
            },
        )
        return consortium, projects, created

    async def list_consortium_tasks(self, actor: User, number: int) -> list[Task]:
        _, projects = await self._consortium_projects(number)
        if not projects:
            return []
        filters = TaskFilters(
            visible_to_user_id=None if actor.is_privileged else actor.id,
            project_ids=[project.id for project in projects if project.id is not None],
        )
        return await self._repository.list_all(filters)


__all__ = ["TASK_UPLOAD_NAMESPACE", "TaskService", "parse_status_filter"]
