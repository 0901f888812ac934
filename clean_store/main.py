"""FastAPI application."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import DEFAULT_JWT_SECRET, Settings, get_settings
from .container import Container, build_container
from .domain_errors import DomainError, FieldError, ValidationError
from .problem_details import build_problem_details_response, internal_error_response
from .routers import auth, products, system, users

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def check_production_settings(settings: Settings) -> None:
    """Fail closed on insecure production configuration."""
    if not settings.is_production:
        return
    if settings.AUTH_PROVIDER == "jwt" and settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if settings.PASSWORD_HASHER == "fast":
        raise RuntimeError("PASSWORD_HASHER=fast is not allowed in production.")
    if any(origin.strip() == "*" for origin in settings.cors_origins):
        raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard).")


async def _handle_domain_error(_: Request, exc: DomainError):
    return build_problem_details_response(exc)


async def _handle_request_validation_error(_: Request, exc: RequestValidationError):
    # Malformed JSON and similar framework-level failures.
    fields = [
        FieldError(
            field=".".join(str(part) for part in error.get("loc", ())) or "body",
            code=str(error.get("type", "invalid")).upper(),
            message=str(error.get("msg", "Invalid value")),
        )
        for error in exc.errors()
    ]
    return build_problem_details_response(ValidationError.from_field_errors(fields))


async def _handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return internal_error_response()


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)
    check_production_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "container", None) is None:
            owned = await build_container(settings)
            app.state.container = owned
        try:
            yield
        finally:
            if owned is not None:
                await owned.aclose()
                app.state.container = None

    app = FastAPI(
        title=settings.APP_NAME,
        version=__version__,
        description="User and product management API",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"] if settings.is_production else ["*"],
    )

    app.add_exception_handler(DomainError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)

    app.include_router(system.router)
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(products.router)

    @app.get("/")
    def root():
        """Root endpoint."""
        return {"message": settings.APP_NAME, "version": __version__, "docs": "/docs"}

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn using HOST and PORT from settings."""
    settings = get_settings()
    uvicorn.run("clean_store.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
