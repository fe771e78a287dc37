"""
Health check endpoint - used by load balancers and the Docker healthcheck.

- GET /health - 200 while Redis answers PING, 503 otherwise
"""
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from catchhook.store import RecordStore, StoreUnavailableError, get_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    store: RecordStore = Depends(get_store),
):
    """Readiness check - verifies Redis connectivity."""
    try:
        await store.ping()
    except StoreUnavailableError as e:
        logger.warning("Redis health check failed: %s", str(e))
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "redis": "disconnected"},
        )
    return {"status": "healthy", "redis": "connected"}
