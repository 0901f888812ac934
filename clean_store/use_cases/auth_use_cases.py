"""Login, logout and token resolution."""
from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_core import PydanticCustomError

from ..auth import AuthenticationService, AuthToken, AuthUser
from ..domain_errors import DomainError, UnauthorizedError
from ..events import UserLoggedIn
from ..result import Result, err, ok
from ..services.event_dispatcher import EventDispatcher, publish
from ..validation import InputSchema, TokenText, validate_input
from ..value_objects import Email


class LoginInput(InputSchema):
    email: str
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("REQUIRED", "Password is required")
        return value


class LogoutInput(InputSchema):
    token: TokenText


class BearerTokenInput(InputSchema):
    token: Optional[str] = None


class LoginUser:
    def __init__(
        self,
        auth_service: AuthenticationService,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._auth = auth_service
        self._events = event_dispatcher

    async def execute(self, raw) -> Result[AuthToken, DomainError]:
        parsed = validate_input(LoginInput, raw)
        if not parsed.ok:
            return parsed
        email = Email.create(parsed.value.email)
        if not email.ok:
            return email

        token = await self._auth.authenticate(email.value.value, parsed.value.password)
        if token is None:
            return err(UnauthorizedError.invalid_credentials())

        if self._events is not None:
            user = await self._auth.verify_token(token.token)
            if user is not None:
                await publish(self._events, UserLoggedIn(user.id, {"email": user.email}))
        return ok(token)


class LogoutUser:
    def __init__(self, auth_service: AuthenticationService) -> None:
        self._auth = auth_service

    async def execute(self, raw) -> Result[None, DomainError]:
        parsed = validate_input(LogoutInput, raw)
        if not parsed.ok:
            return parsed
        await self._auth.revoke_token(parsed.value.token)
        return ok(None)


class GetAuthenticatedUser:
    """Resolve a bearer token to the user it was issued for."""

    def __init__(self, auth_service: AuthenticationService) -> None:
        self._auth = auth_service

    async def execute(self, raw) -> Result[AuthUser, DomainError]:
        parsed = validate_input(BearerTokenInput, raw)
        if not parsed.ok:
            return parsed
        token = parsed.value.token
        if token is None or not token.strip():
            return err(UnauthorizedError.no_token())

        user = await self._auth.verify_token(token)
        if user is None:
            return err(UnauthorizedError.invalid_token())
        return ok(user)
