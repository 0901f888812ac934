"""Opaque bearer tokens resolved through a server-side, revocable store."""
from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..auth import TOKEN_TTL, AuthenticationService, AuthToken, AuthUser, PasswordHasher, now_utc
from ..repositories import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredToken:
    user_id: str
    expires_at: datetime


class OpaqueTokenAuthService(AuthenticationService):
    """Random tokens mapped to ``{user_id, expires_at}``.

    Expired tokens are detected lazily on verify and evicted then. Revocation
    deletes the mapping, so it is permanent for the life of this instance.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        password_hasher: PasswordHasher,
        *,
        token_ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._users = user_repository
        self._hasher = password_hasher
        self._ttl = token_ttl
        self._clock = clock
        self._tokens: dict[str, StoredToken] = {}

    async def authenticate(self, email: str, password: str) -> AuthToken | None:
        user = await self._users.find_by_email(email.strip().lower())
        if user is None:
            return None
        if not await self._hasher.verify(password, user.password_hash):
            return None

        token = secrets.token_urlsafe(32)
        expires_at = self._clock() + self._ttl
        self._tokens[token] = StoredToken(user_id=user.id, expires_at=expires_at)
        logger.debug("Issued opaque token for user %s", user.id)
        return AuthToken(token=token, expires_at=expires_at)

    async def verify_token(self, token: str) -> AuthUser | None:
        stored = self._tokens.get(token)
        if stored is None:
            return None
        if self._clock() >= stored.expires_at:
            self._tokens.pop(token, None)
            return None

        user = await self._users.find_by_id(stored.user_id)
        if user is None:
            return None
        return AuthUser(id=user.id, email=user.email)

    async def revoke_token(self, token: str) -> None:
        if self._tokens.pop(token, None) is not None:
            logger.debug("Revoked opaque token")

    async def delete_user(self, user_id: str) -> None:
        owned = [token for token, stored in self._tokens.items() if stored.user_id == user_id]
        for token in owned:
            del self._tokens[token]
        logger.debug("Dropped %d token(s) for user %s", len(owned), user_id)

    def clear(self) -> None:
        self._tokens.clear()
