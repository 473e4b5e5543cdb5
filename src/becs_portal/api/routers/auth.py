"""Routes handling user authentication flows."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from ...core.config import Settings
from ...core.security import TokenType, token_lifetime
from ...deps import AuthContextDependency, DatabaseSessionDependency, SettingsDependency
from ...models import User
from ...schemas import (
    AuthResponse,
    AuthTokens,
    LogoutRequest,
    LogoutResponse,
    RefreshRequest,
    RefreshResponse,
    UserPublic,
)
from ...services import AuthService
from ...services.auth import TokenPair

router = APIRouter(prefix="/auth", tags=["auth"])


def _build_tokens(token_pair: TokenPair, settings: Settings) -> AuthTokens:
    return AuthTokens(
        access_token=token_pair.access.token,
        refresh_token=token_pair.refresh.token,
        expires_in=int(token_lifetime(TokenType.ACCESS, settings).total_seconds()),
        refresh_expires_in=int(token_lifetime(TokenType.REFRESH, settings).total_seconds()),
    )


def _map_user(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Authenticate using email and password",
)
async def login(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> AuthResponse:
    service = AuthService(session, settings)
    user = await service.authenticate_user(form_data.username, form_data.password)
    token_pair = service.build_token_pair(user)
    return AuthResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings))


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access credentials using a refresh token",
)
async def refresh_tokens(
    payload: RefreshRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> RefreshResponse:
    service = AuthService(session, settings)
    user, token_pair = await service.refresh_from_token(payload.refresh_token)
    return RefreshResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings))


@router.get("/user", response_model=UserPublic, summary="Return the authenticated user")
async def read_current_user(context: AuthContextDependency) -> UserPublic:
    return _map_user(context.user)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    status_code=status.HTTP_200_OK,
    summary="Revoke the presented access token and an optional refresh token",
)
async def logout(
    context: AuthContextDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    payload: LogoutRequest | None = None,
) -> LogoutResponse:
    service = AuthService(session, settings)
    revoked = service.logout(context.token, payload.refresh_token if payload else None)
    return LogoutResponse(revoked=revoked)
