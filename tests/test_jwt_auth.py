from __future__ import annotations

from datetime import timedelta

import pytest
import pytest_asyncio
from jose import jwt

from clean_store.entities import User
from clean_store.services.jwt_auth import JwtAuthService

SECRET = "test-secret"


@pytest.fixture
def jwt_service(user_repository, password_hasher, clock) -> JwtAuthService:
    return JwtAuthService(user_repository, password_hasher, secret_key=SECRET, clock=clock)


@pytest_asyncio.fixture
async def alice(user_repository, password_hasher) -> User:
    user = User.create(
        id="7f1c7d2e-0000-4000-8000-000000000002",
        email="alice@example.com",
        password_hash=await password_hasher.hash("password123"),
    )
    await user_repository.save(user)
    return user


def test_empty_secret_is_rejected(user_repository, password_hasher) -> None:
    with pytest.raises(ValueError, match="JWT secret key cannot be empty"):
        JwtAuthService(user_repository, password_hasher, secret_key="")


@pytest.mark.asyncio
async def test_token_carries_standard_claims(jwt_service, clock, alice) -> None:
    token = await jwt_service.authenticate("alice@example.com", "password123")

    claims = jwt.get_unverified_claims(token.token)
    issued = int(clock.now.timestamp())
    jti = claims.pop("jti")
    assert isinstance(jti, str) and jti
    assert claims == {"sub": alice.id, "email": "alice@example.com", "iat": issued, "exp": issued + 3600}
    assert token.expires_at == clock.now + timedelta(hours=1)


@pytest.mark.asyncio
async def test_verify_checks_signature(jwt_service, clock, alice) -> None:
    forged = jwt.encode(
        {"sub": alice.id, "email": alice.email, "exp": int(clock.now.timestamp()) + 60},
        "other-secret",
        algorithm="HS256",
    )
    assert await jwt_service.verify_token(forged) is None
    assert await jwt_service.verify_token("not-a-jwt") is None


@pytest.mark.asyncio
async def test_verify_honours_injected_clock(jwt_service, clock, alice) -> None:
    token = await jwt_service.authenticate("alice@example.com", "password123")

    clock.advance(timedelta(hours=1))
    user = await jwt_service.verify_token(token.token)
    assert (user.id, user.email) == (alice.id, "alice@example.com")

    clock.advance(timedelta(seconds=1))
    assert await jwt_service.verify_token(token.token) is None


@pytest.mark.asyncio
async def test_revocation_uses_deny_lists(jwt_service, clock, alice) -> None:
    first = await jwt_service.authenticate("alice@example.com", "password123")
    await jwt_service.revoke_token(first.token)
    assert await jwt_service.verify_token(first.token) is None

    clock.advance(timedelta(seconds=5))
    second = await jwt_service.authenticate("alice@example.com", "password123")
    assert await jwt_service.verify_token(second.token) is not None

    await jwt_service.delete_user(alice.id)
    assert await jwt_service.verify_token(second.token) is None


@pytest.mark.asyncio
async def test_same_second_logins_are_independent_sessions(jwt_service, alice) -> None:
    laptop = await jwt_service.authenticate("alice@example.com", "password123")
    phone = await jwt_service.authenticate("alice@example.com", "password123")

    assert laptop.token != phone.token
    await jwt_service.revoke_token(laptop.token)
    assert await jwt_service.verify_token(laptop.token) is None
    assert (await jwt_service.verify_token(phone.token)).id == alice.id


@pytest.mark.asyncio
async def test_login_right_after_logout_gets_a_usable_token(jwt_service, alice) -> None:
    first = await jwt_service.authenticate("alice@example.com", "password123")
    await jwt_service.revoke_token(first.token)

    second = await jwt_service.authenticate("alice@example.com", "password123")

    assert await jwt_service.verify_token(second.token) is not None


@pytest.mark.asyncio
async def test_wrong_password_returns_none(jwt_service, alice) -> None:
    assert await jwt_service.authenticate("alice@example.com", "nope") is None
    assert await jwt_service.authenticate("nobody@example.com", "password123") is None
