"""Service layer for the project registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Consortium, Project, ProjectStatus, ProjectType, User
from ..repositories import ProjectRepository
from ..schemas import ConsortiumGroup, GroupedProjects, ProjectCreate, ProjectRead, ProjectUpdate

logger = logging.getLogger(__name__)

UNASSIGNED_BUCKET = "unassigned"


@dataclass(slots=True)
class ProjectProgress:
    total: int
    completed: int

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.completed / self.total * 100, 2)


class ProjectService:
    """High-level business operations for ``Project`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = ProjectRepository(session)

    async def _get_or_404(self, project_id: int) -> Project:
        project = await self._repository.get(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} does not exist.")
        return project

    async def _ensure_code_available(self, code: str, exclude_id: int | None = None) -> None:
        existing = await self._repository.get_by_code(code)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"Project code {code!r} is already in use.", code="project_code_taken")

    async def progress_for(self, projects: list[Project]) -> dict[int, ProjectProgress]:
        counts = await self._repository.task_counts([project.id for project in projects if project.id is not None])
        return {
            project.id: ProjectProgress(*counts.get(project.id, (0, 0)))
            for project in projects
            if project.id is not None
        }

    async def to_read(self, projects: list[Project]) -> list[ProjectRead]:
        """Attach task progress figures to each project."""
        progress = await self.progress_for(projects)
        items: list[ProjectRead] = []
        for project in projects:
            stats = progress.get(project.id, ProjectProgress(0, 0))
            read = ProjectRead.model_validate(project)
            items.append(
                read.model_copy(
                    update={
                        "task_count": stats.total,
                        "completed_task_count": stats.completed,
                        "completion_percentage": stats.percentage,
                    }
                )
            )
        return items

    async def create_project(self, actor: User, payload: ProjectCreate) -> Project:
        await self._ensure_code_available(payload.code)
        project = Project(**payload.model_dump(), created_by_id=actor.id)
        await self._repository.add(project)
        await self._session.commit()
        await self._repository.refresh(project)
        logger.info(
            "Project created",
            extra={"project_id": project.id, "code": project.code, "actor_id": actor.id},
        )
        return project

    async def get_project(self, project_id: int) -> Project:
        return await self._get_or_404(project_id)

    async def list_projects(
        self,
        *,
        project_type: ProjectType | None = None,
        consortium: Consortium | None = None,
        status: ProjectStatus | None = None,
        include_archived: bool = False,
    ) -> list[Project]:
        return await self._repository.list_filtered(
            project_type=project_type,
            consortium=consortium,
            status=status,
            include_archived=include_archived,
        )

    async def update_project(self, actor: User, project_id: int, payload: ProjectUpdate) -> Project:
        """Apply a partial update, re-checking the merged record's invariants."""
        project = await self._get_or_404(project_id)
        updates = payload.model_dump(exclude_unset=True)
        for required in ("code", "name", "type", "status", "is_archived"):
            if required in updates and updates[required] is None:
                raise ValidationError(f"{required} cannot be empty.", fields={required: "Cannot be empty."})

        project_type = updates.get("type", project.type)
        consortium = updates.get("consortium", project.consortium)
        if "type" in updates and project_type is ProjectType.PRIVATE and "consortium" not in updates:
            consortium = None
            updates["consortium"] = None
        if consortium is not None and project_type is not ProjectType.AHP:
            raise ValidationError(
                "Only AHP projects can belong to a consortium.",
                fields={"consortium": "Only AHP projects can belong to a consortium."},
            )
        start = updates.get("start_date", project.start_date)
        end = updates.get("end_date", project.end_date)
        if start is not None and end is not None and end < start:
            raise ValidationError(
                "end_date cannot be before start_date.",
                fields={"end_date": "end_date cannot be before start_date."},
            )
        if "code" in updates:
            updates["code"] = updates["code"].strip()
            await self._ensure_code_available(updates["code"], exclude_id=project.id)

        for field_name, value in updates.items():
            setattr(project, field_name, value)
        await self._session.commit()
        await self._repository.refresh(project)
        logger.info(
            "Project updated",
            extra={"project_id": project.id, "actor_id": actor.id, "fields": sorted(updates)},
        )
        return project

    async def archive_project(self, actor: User, project_id: int) -> Project:
        """Soft delete: archived projects keep their tasks but accept no new ones."""
        project = await self._get_or_404(project_id)
        if not project.is_archived:
            project.is_archived = True
            await self._session.commit()
            await self._repository.refresh(project)
            logger.info("Project archived", extra={"project_id": project.id, "actor_id": actor.id})
        return project

    async def grouped(self) -> GroupedProjects:
        """AHP projects per consortium bucket plus the private portfolio."""
        projects = await self._repository.list_filtered()
        reads = await self.to_read(projects)
        buckets: dict[str, list[ProjectRead]] = {member.value: [] for member in Consortium}
        buckets[UNASSIGNED_BUCKET] = []
        private: list[ProjectRead] = []
        for read in reads:
            if read.type is ProjectType.PRIVATE:
                private.append(read)
                continue
            key = read.consortium.value if read.consortium is not None else UNASSIGNED_BUCKET
            buckets[key].append(read)
        return GroupedProjects(
            ahp=[ConsortiumGroup(consortium=key, projects=items) for key, items in buckets.items()],
            private=private,
        )


__all__ = ["ProjectProgress", "ProjectService", "UNASSIGNED_BUCKET"]
