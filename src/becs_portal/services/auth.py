"""Authentication service encapsulating login, refresh and logout flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from jose import ExpiredSignatureError, JWTError
from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import (
    IssuedToken,
    TokenType,
    issue_token,
    read_token,
    revoked_tokens,
    verify_password,
)
from ..errors import ApplicationError, AuthenticationError, PermissionDeniedError
from ..models import User
from ..repositories import UserRepository
from ..schemas.auth import TokenPayload

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TokenPair:
    """Container for access and refresh tokens."""

    access: IssuedToken
    refresh: IssuedToken


def decode_payload(token: str, token_type: TokenType, settings: Settings) -> TokenPayload:
    """Decode and validate ``token``, rejecting wrong types and revoked ids."""

    try:
        raw = read_token(token, token_type, settings)
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Token has expired.", code="token_expired") from exc
    except JWTError as exc:
        raise AuthenticationError("Invalid token.") from exc

    try:
        payload = TokenPayload.model_validate(raw)
    except PydanticValidationError as exc:
        raise AuthenticationError("Invalid token.") from exc

    if payload.type is not token_type:
        raise AuthenticationError("Invalid token type.")
    if payload.jti in revoked_tokens:
        raise AuthenticationError("Token has been revoked.", code="token_revoked")
    return payload


class AuthService:
    """High-level authentication workflows."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._user_repository = UserRepository(session)

    async def authenticate_user(self, email: str, password: str) -> User:
        user = await self._user_repository.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("Failed login attempt")
            raise AuthenticationError("Incorrect email or password.", code="invalid_credentials")
        if not user.is_active:
            raise PermissionDeniedError("User account is inactive.", code="inactive_user")
        logger.info("User logged in", extra={"user_id": user.id})
        return user

    def build_token_pair(self, user: User) -> TokenPair:
        if user.id is None:
            raise ApplicationError("User must be persisted before issuing tokens.")
        return TokenPair(
            access=issue_token(user.id, user.role, TokenType.ACCESS, self._settings),
            refresh=issue_token(user.id, user.role, TokenType.REFRESH, self._settings),
        )

    async def resolve_user(self, payload: TokenPayload) -> User:
        """Load the active user named by a validated token."""
        try:
            user_id = int(payload.sub)
        except ValueError as exc:
            raise AuthenticationError("Invalid token subject.") from exc
        user = await self._user_repository.get(user_id)
        if user is None:
            raise AuthenticationError("User no longer exists.")
        if not user.is_active:
            raise PermissionDeniedError("User account is inactive.", code="inactive_user")
        return user

    async def refresh_from_token(self, refresh_token: str) -> tuple[User, TokenPair]:
        payload = decode_payload(refresh_token, TokenType.REFRESH, self._settings)
        user = await self.resolve_user(payload)
        revoked_tokens.revoke(payload.jti, payload.exp)
        return user, self.build_token_pair(user)

    def logout(self, access_payload: TokenPayload, refresh_token: str | None = None) -> int:
        """Revoke the presented access token and, if given, a refresh token."""
        refresh_payload = None
        if refresh_token:
            refresh_payload = decode_payload(refresh_token, TokenType.REFRESH, self._settings)
            if refresh_payload.sub != access_payload.sub:
                raise PermissionDeniedError("Refresh token belongs to another user.")
        revoked_tokens.revoke(access_payload.jti, access_payload.exp)
        revoked = 1
        if refresh_payload is not None:
            revoked_tokens.revoke(refresh_payload.jti, refresh_payload.exp)
            revoked += 1
        logger.info("User logged out", extra={"user_id": access_payload.sub, "revoked": revoked})
        return revoked


__all__ = ["AuthService", "TokenPair", "decode_payload"]
