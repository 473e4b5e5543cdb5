"""Staff directory endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency, PrivilegedUserDependency
from ...models import UserRole
from ...schemas import UserCreate, UserPublic, UserUpdate
from ...services import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Register a staff member",
)
async def create_user(
    payload: UserCreate,
    session: DatabaseSessionDependency,
    _: PrivilegedUserDependency,
) -> UserPublic:
    user = await UserService(session).create_user(payload)
    return UserPublic.model_validate(user)


@router.get("", response_model=list[UserPublic], summary="List staff members")
async def list_users(
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
    role: Annotated[UserRole | None, Query(description="Filter by role.")] = None,
    department: Annotated[str | None, Query(description="Filter by department.")] = None,
    is_active: Annotated[bool | None, Query(description="Filter by activation flag.")] = None,
) -> list[UserPublic]:
    users = await UserService(session).list_users(
        role=role,
        department=department,
        is_active=is_active,
    )
    return [UserPublic.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserPublic, summary="Fetch a staff member")
async def read_user(
    user_id: int,
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
) -> UserPublic:
    user = await UserService(session).get_user(user_id)
    return UserPublic.model_validate(user)


@router.patch("/{user_id}", response_model=UserPublic, summary="Update a staff member")
async def update_user(
    user_id: int,
    payload: UserUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> UserPublic:
    user = await UserService(session).update_user(current_user, user_id, payload)
    return UserPublic.model_validate(user)
