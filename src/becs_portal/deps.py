"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Annotated, Awaitable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.context import set_actor
from .core.security import TokenType, claims_are_privileged
from .core.storage import FileStorage
from .db.session import get_session
from .errors import PermissionDeniedError
from .models import User
from .schemas.auth import TokenPayload
from .services.auth import AuthService, decode_payload

_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


SettingsDependency = Annotated[Settings, Depends(get_settings)]
DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


@dataclass(slots=True)
class AuthContext:
    """The acting user for a request together with the token they presented."""

    user: User
    token: TokenPayload

    @property
    def is_privileged(self) -> bool:
        return self.user.is_privileged and claims_are_privileged(self.token.roles)


async def get_auth_context(
    token: str = Depends(_oauth2_scheme),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> AuthContext:
    """Resolve the bearer token into an :class:`AuthContext`."""

    payload = decode_payload(token, TokenType.ACCESS, settings)
    user = await AuthService(session, settings).resolve_user(payload)
    set_actor(user.id)
    return AuthContext(user=user, token=payload)


def require_current_user(*, privileged: bool = False) -> Callable[..., Awaitable[User]]:
    """Return a dependency enforcing authentication and optional privilege."""

    async def _dependency(context: AuthContext = Depends(get_auth_context)) -> User:
        if privileged and not context.is_privileged:
            raise PermissionDeniedError("Only admins and directors may perform this action.")
        return context.user

    return _dependency


def get_file_storage(settings: Settings = Depends(get_settings)) -> FileStorage:
    return FileStorage.from_settings(settings)


AuthContextDependency = Annotated[AuthContext, Depends(get_auth_context)]
CurrentUserDependency = Annotated[User, Depends(require_current_user())]
PrivilegedUserDependency = Annotated[User, Depends(require_current_user(privileged=True))]
FileStorageDependency = Annotated[FileStorage, Depends(get_file_storage)]


__all__ = [
    "AuthContext",
    "AuthContextDependency",
    "CurrentUserDependency",
    "DatabaseSessionDependency",
    "FileStorageDependency",
    "PrivilegedUserDependency",
    "SettingsDependency",
    "get_auth_context",
    "get_db_session",
    "get_file_storage",
    "require_current_user",
]
