"""Authentication and password hashing ports plus their shared helpers."""
from __future__ import annotations

import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Fixed lifetime of an issued token.
TOKEN_TTL = timedelta(hours=1)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token scheme; missing headers are handled by the routes.
security = HTTPBearer(auto_error=False)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuthToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str


class AuthenticationService(ABC):
    """Issues, verifies and revokes bearer tokens."""

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> AuthToken | None:
        """Check credentials and issue a token, or None on any mismatch."""

    @abstractmethod
    async def verify_token(self, token: str) -> AuthUser | None:
        """Resolve a token to its user, or None if invalid, expired or revoked."""

    @abstractmethod
    async def revoke_token(self, token: str) -> None:
        """Invalidate a token. Unknown tokens are ignored."""

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Make every token issued to ``user_id`` unusable."""


class PasswordHasher(ABC):
    @abstractmethod
    async def hash(self, plain: str) -> str:
        """Return a hash for storage."""

    @abstractmethod
    async def verify(self, plain: str, hashed: str) -> bool:
        """Check a plaintext password against a stored hash."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        # Invalid/corrupted hash should not crash login flow.
        logger.exception("Password verification failed due to invalid hash format")
        return False


def get_password_hash(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


class BcryptPasswordHasher(PasswordHasher):
    """passlib/bcrypt hasher; work runs off the event loop."""

    async def hash(self, plain: str) -> str:
        return await run_in_threadpool(get_password_hash, plain)

    async def verify(self, plain: str, hashed: str) -> bool:
        return await run_in_threadpool(verify_password, plain, hashed)


class FastPasswordHasher(PasswordHasher):
    """Unsalted SHA-256. For tests and demos only."""

    async def hash(self, plain: str) -> str:
        return hashlib.sha256(plain.encode("utf-8")).hexdigest()

    async def verify(self, plain: str, hashed: str) -> bool:
        return hmac.compare_digest(await self.hash(plain), hashed)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Extract the raw bearer token from the Authorization header, if any."""
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials
