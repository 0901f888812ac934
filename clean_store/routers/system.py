"""System endpoints."""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..container import Container, get_container
from ..schemas import HealthResponse

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)

# Looked up to prove storage answers; never expected to exist.
_HEALTH_CHECK_USER_ID = "00000000-0000-0000-0000-000000000000"


@router.get("/health", response_model=HealthResponse)
async def health_check(container: Container = Depends(get_container)):
    """Health check endpoint."""
    now = datetime.now(timezone.utc)
    try:
        await container.user_repository.find_by_id(_HEALTH_CHECK_USER_ID)
    except Exception:
        logger.exception("Health check failed")
        body = HealthResponse(status="unhealthy", timestamp=now, database="unavailable")
        return JSONResponse(status_code=503, content=body.model_dump(mode="json", by_alias=True))
    return HealthResponse(status="ok", timestamp=now, database="ok")
