"""Auth endpoints."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Response

from ..auth import get_bearer_token
from ..container import Container, get_container
from ..domain_errors import ValidationError
from ..schemas import AuthUserResponse, MessageResponse, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_no_store(response: Response) -> None:
    # Keep tokens out of shared caches.
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


@router.post("/login", response_model=TokenResponse)
async def login(
    response: Response,
    payload: Any = Body(default=None),
    container: Container = Depends(get_container),
):
    """Exchange email and password for a bearer token."""
    result = await container.login_user.execute(payload)
    token = result.unwrap()
    logger.info("Issued token expiring at %s", token.expires_at.isoformat())
    _set_no_store(response)
    return TokenResponse.model_validate(token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    container: Container = Depends(get_container),
):
    """Revoke the presented bearer token."""
    if token is None:
        raise ValidationError.single_field("token", "REQUIRED", "No token provided")
    result = await container.logout_user.execute({"token": token})
    result.unwrap()
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AuthUserResponse)
async def me(
    token: Optional[str] = Depends(get_bearer_token),
    container: Container = Depends(get_container),
):
    """Return the user the bearer token was issued for."""
    result = await container.get_authenticated_user.execute({"token": token})
    return AuthUserResponse.model_validate(result.unwrap())
