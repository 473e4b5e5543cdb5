"""Project portfolio endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency, PrivilegedUserDependency
from ...models import Consortium, ProjectStatus, ProjectType
from ...schemas import GroupedProjects, ProjectCreate, ProjectRead, ProjectUpdate
from ...services import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


async def _read_one(service: ProjectService, project) -> ProjectRead:
    reads = await service.to_read([project])
    return reads[0]


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    payload: ProjectCreate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> ProjectRead:
    service = ProjectService(session)
    project = await service.create_project(current_user, payload)
    return await _read_one(service, project)


@router.get("", response_model=list[ProjectRead], summary="List projects")
async def list_projects(
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
    project_type: Annotated[
        ProjectType | None,
        Query(alias="type", description="Filter by project type."),
    ] = None,
    consortium: Annotated[Consortium | None, Query(description="Filter by consortium.")] = None,
    project_status: Annotated[
        ProjectStatus | None,
        Query(alias="status", description="Filter by lifecycle status."),
    ] = None,
    include_archived: Annotated[bool, Query(description="Include archived projects.")] = False,
) -> list[ProjectRead]:
    service = ProjectService(session)
    projects = await service.list_projects(
        project_type=project_type,
        consortium=consortium,
        status=project_status,
        include_archived=include_archived,
    )
    return await service.to_read(projects)


@router.get(
    "/grouped",
    response_model=GroupedProjects,
    summary="List projects grouped by consortium",
)
async def grouped_projects(
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
) -> GroupedProjects:
    return await ProjectService(session).grouped()


@router.get("/{project_id}", response_model=ProjectRead, summary="Fetch a project")
async def read_project(
    project_id: int,
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
) -> ProjectRead:
    service = ProjectService(session)
    project = await service.get_project(project_id)
    return await _read_one(service, project)


@router.patch("/{project_id}", response_model=ProjectRead, summary="Update a project")
async def update_project(
    project_id: int,
    payload: ProjectUpdate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> ProjectRead:
    service = ProjectService(session)
    project = await service.update_project(current_user, project_id, payload)
    return await _read_one(service, project)


@router.delete(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Archive a project",
)
async def archive_project(
    project_id: int,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> ProjectRead:
    service = ProjectService(session)
    project = await service.archive_project(current_user, project_id)
    return await _read_one(service, project)
