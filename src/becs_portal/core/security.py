"""Password hashing, signed portal tokens and token revocation.

Access and refresh tokens are HS256 JWTs signed with separate keys. Both
carry the holder's role claims; a privileged action needs the claim *and*
a privileged role on the user row loaded for the request, so a demotion
takes effect immediately and a promotion on the next login.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from threading import Lock
from typing import Any, Iterable
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..models.user import UserRole
from .config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PRIVILEGED_CLAIM = "privileged"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(slots=True, frozen=True)
class IssuedToken:
    token: str
    token_type: TokenType
    jti: str
    expires_at: datetime


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def role_claims(role: UserRole) -> list[str]:
    """``["director", "privileged"]`` for admins and directors, ``["staff"]`` otherwise."""
    claims = [role.value]
    if role.is_privileged:
        claims.append(PRIVILEGED_CLAIM)
    return claims


def claims_are_privileged(claims: Iterable[str]) -> bool:
    return PRIVILEGED_CLAIM in claims


def token_lifetime(token_type: TokenType, settings: Settings) -> timedelta:
    if token_type is TokenType.ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    return timedelta(minutes=settings.refresh_token_expire_minutes)


def _signing_key(token_type: TokenType, settings: Settings) -> str:
    if token_type is TokenType.ACCESS:
        return settings.jwt_secret_key
    return settings.jwt_refresh_secret_key


def issue_token(
    user_id: int,
    role: UserRole,
    token_type: TokenType,
    settings: Settings,
    *,
    issued_at: datetime | None = None,
) -> IssuedToken:
    """Sign a token of ``token_type`` for the user ``user_id``."""
    now = issued_at or datetime.now(timezone.utc)
    expires_at = now + token_lifetime(token_type, settings)
    jti = uuid4().hex
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "roles": role_claims(role),
        "type": token_type.value,
        "jti": jti,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(claims, _signing_key(token_type, settings), algorithm=settings.jwt_algorithm)
    return IssuedToken(token=token, token_type=token_type, jti=jti, expires_at=expires_at)


def read_token(token: str, token_type: TokenType, settings: Settings) -> dict[str, Any]:
    """Verify the signature and expiry of ``token``; raises ``JWTError``."""
    return jwt.decode(token, _signing_key(token_type, settings), algorithms=[settings.jwt_algorithm])


class RevocationList:
    """Token ids revoked by logout or refresh, kept until the token would expire."""

    def __init__(self) -> None:
        self._expiry_by_jti: dict[str, datetime] = {}
        self._lock = Lock()

    def revoke(self, jti: str, expires_at: datetime) -> None:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        with self._lock:
            self._drop_expired()
            self._expiry_by_jti[jti] = expires_at

    def __contains__(self, jti: object) -> bool:
        with self._lock:
            self._drop_expired()
            return jti in self._expiry_by_jti

    def __len__(self) -> int:
        with self._lock:
            self._drop_expired()
            return len(self._expiry_by_jti)

    def clear(self) -> None:
        with self._lock:
            self._expiry_by_jti.clear()

    def _drop_expired(self) -> None:
        now = datetime.now(timezone.utc)
        for jti in [jti for jti, expiry in self._expiry_by_jti.items() if expiry <= now]:
            del self._expiry_by_jti[jti]


revoked_tokens = RevocationList()


__all__ = [
    "IssuedToken",
    "JWTError",
    "PRIVILEGED_CLAIM",
    "RevocationList",
    "TokenType",
    "claims_are_privileged",
    "hash_password",
    "issue_token",
    "pwd_context",
    "read_token",
    "revoked_tokens",
    "role_claims",
    "token_lifetime",
    "verify_password",
]
