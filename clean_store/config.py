"""Application configuration."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "clean-store-dev-secret-change-me"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App
    APP_NAME: str = "Clean Store API"
    ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Backends: "inmemory" | "sqlalchemy"
    REPOSITORY_TYPE: str = "inmemory"
    # "inmemory" (opaque tokens) | "jwt" (signed tokens)
    AUTH_PROVIDER: str = "inmemory"
    # "bcrypt" | "fast" (unsalted sha256, demo only)
    PASSWORD_HASHER: str = "bcrypt"

    # Database (used when REPOSITORY_TYPE=sqlalchemy)
    DATABASE_URL: str = "sqlite+aiosqlite:///./clean_store.db"
    DATABASE_ECHO: bool = False

    # JWT
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
