from __future__ import annotations

import pytest

from clean_store.auth import BcryptPasswordHasher
from clean_store.config import Settings
from clean_store.container import build_auth_service, build_password_hasher
from clean_store.services.in_memory_repositories import InMemoryUserRepository
from clean_store.services.jwt_auth import JwtAuthService
from clean_store.services.opaque_token_auth import OpaqueTokenAuthService


def test_defaults_boot_in_memory() -> None:
    settings = Settings(_env_file=None)
    assert settings.REPOSITORY_TYPE == "inmemory"
    assert settings.AUTH_PROVIDER == "inmemory"
    assert settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES == 60
    assert not settings.is_production


def test_cors_origins_are_split_and_trimmed() -> None:
    settings = Settings(_env_file=None, ALLOWED_ORIGINS=" https://a.example , ,https://b.example")
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_auth_provider_selection() -> None:
    users = InMemoryUserRepository()
    hasher = build_password_hasher(Settings(_env_file=None))

    assert isinstance(hasher, BcryptPasswordHasher)
    assert isinstance(build_auth_service(Settings(_env_file=None), users, hasher), OpaqueTokenAuthService)
    assert isinstance(
        build_auth_service(Settings(_env_file=None, AUTH_PROVIDER="jwt"), users, hasher),
        JwtAuthService,
    )


def test_unknown_backends_are_rejected() -> None:
    with pytest.raises(ValueError, match="AUTH_PROVIDER"):
        build_auth_service(Settings(_env_file=None, AUTH_PROVIDER="firebase"), InMemoryUserRepository(), None)
    with pytest.raises(ValueError, match="PASSWORD_HASHER"):
        build_password_hasher(Settings(_env_file=None, PASSWORD_HASHER="md5"))


def test_run_serves_app_with_configured_host_and_port(monkeypatch) -> None:
    from clean_store import main

    calls = []
    monkeypatch.setattr(main, "get_settings", lambda: Settings(_env_file=None, HOST="0.0.0.0", PORT=9001))
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main.run()

    assert calls == [("clean_store.main:app", {"host": "0.0.0.0", "port": 9001, "log_level": "info"})]
