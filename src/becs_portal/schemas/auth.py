"""Schemas describing authentication payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..core.security import TokenType
from .user import UserPublic


class RefreshRequest(BaseModel):
    """Request payload for refreshing JWT tokens."""

    refresh_token: str


class LogoutRequest(BaseModel):
    """Optional refresh token to revoke alongside the access token."""

    refresh_token: str | None = None


class AuthTokens(BaseModel):
    """Access and refresh tokens returned to clients."""

    access_token: str
    refresh_token: str
    token_type: str = Field(default="bearer", frozen=True)
    expires_in: int
    refresh_expires_in: int


class AuthResponse(BaseModel):
    """Authentication response containing issued tokens and user metadata."""

    user: UserPublic
    tokens: AuthTokens


class RefreshResponse(BaseModel):
    """Response payload for a refresh request."""

    user: UserPublic
    tokens: AuthTokens


class LogoutResponse(BaseModel):
    revoked: int = Field(description="Number of tokens revoked by the request")


class TokenPayload(BaseModel):
    """Validated JWT payload."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    exp: datetime
    iat: datetime
    jti: str
    roles: list[str]
    type: TokenType


__all__ = [
    "AuthResponse",
    "AuthTokens",
    "LogoutRequest",
    "LogoutResponse",
    "RefreshRequest",
    "RefreshResponse",
    "TokenPayload",
]
