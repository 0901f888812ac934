"""Self-contained signed bearer tokens (HS256 JWT)."""
from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from ..auth import TOKEN_TTL, AuthenticationService, AuthToken, AuthUser, PasswordHasher, now_utc
from ..repositories import UserRepository

logger = logging.getLogger(__name__)


class JwtAuthService(AuthenticationService):
    """Signed tokens carrying ``sub``, ``email``, ``iat``, ``exp`` (epoch seconds) and a random ``jti``.

    Validity needs no server-side lookup. Revocation can only deny-list:
    revoked token strings and deleted user ids are kept in process memory and
    are lost on restart, after which previously revoked, unexpired tokens
    verify again. Durable revocation needs its own store.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        password_hasher: PasswordHasher,
        *,
        secret_key: str,
        algorithm: str = "HS256",
        token_ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        if not secret_key:
            raise ValueError("JWT secret key cannot be empty")
        self._users = user_repository
        self._hasher = password_hasher
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._ttl = token_ttl
        self._clock = clock
        self._revoked_tokens: set[str] = set()
        self._revoked_subjects: set[str] = set()

    async def authenticate(self, email: str, password: str) -> AuthToken | None:
        user = await self._users.find_by_email(email.strip().lower())
        if user is None:
            return None
        if not await self._hasher.verify(password, user.password_hash):
            return None

        now = int(self._clock().timestamp())
        exp = now + int(self._ttl.total_seconds())
        # jti keeps same-second logins distinct for the deny-list.
        claims = {"sub": user.id, "email": user.email, "iat": now, "exp": exp, "jti": secrets.token_urlsafe(16)}
        token = jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
        logger.debug("Issued signed token for user %s", user.id)
        return AuthToken(token=token, expires_at=datetime.fromtimestamp(exp, tz=timezone.utc))

    async def verify_token(self, token: str) -> AuthUser | None:
        if token in self._revoked_tokens:
            return None
        payload = self._decode(token)
        if payload is None:
            return None

        subject = payload.get("sub")
        email = payload.get("email")
        if not isinstance(subject, str) or not isinstance(email, str):
            return None
        if subject in self._revoked_subjects:
            return None
        return AuthUser(id=subject, email=email)

    async def revoke_token(self, token: str) -> None:
        self._revoked_tokens.add(token)

    async def delete_user(self, user_id: str) -> None:
        self._revoked_subjects.add(user_id)

    def _decode(self, token: str) -> dict | None:
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JWTError:
            return None

        # Expiry is checked here so the injected clock is honoured.
        try:
            exp = int(payload["exp"])
        except (KeyError, TypeError, ValueError):
            return None
        if self._clock().timestamp() > exp:
            return None
        return payload
