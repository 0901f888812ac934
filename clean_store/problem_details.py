"""RFC 7807 Problem Details helpers."""
from __future__ import annotations

from http import HTTPStatus

from fastapi.responses import JSONResponse

from .domain_errors import DomainError

PROBLEM_TYPE_BASE = "https://api.clean-store.local/problems"


def build_problem_details_payload(exc: DomainError) -> dict[str, object]:
    try:
        title = HTTPStatus(exc.http_status).phrase
    except ValueError:
        title = "Domain Error"

    payload: dict[str, object] = {
        "type": f"{PROBLEM_TYPE_BASE}/{exc.code.lower()}",
        "title": title,
        "status": exc.http_status,
        "detail": exc.message,
        "code": exc.code,
        "error": exc.message,
    }
    if exc.details is not None:
        payload["details"] = exc.details
    return payload


def build_problem_details_response(exc: DomainError) -> JSONResponse:
    """Render DomainError as RFC 7807 payload with stable domain code."""
    return JSONResponse(
        status_code=exc.http_status,
        content=build_problem_details_payload(exc),
        media_type="application/problem+json",
    )


def internal_error_response() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
