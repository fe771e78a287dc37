"""
Synthetic response configuration endpoints.

- GET  /api/response-config       current config (default when unset or corrupt)
- POST /api/response-config/set   replace the config
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from catchhook.schemas.response_config import ConfigUpdateResponse, ResponseConfig
from catchhook.schemas.webhook import SerializationError
from catchhook.services.response_config import (
    InvalidResponseConfigError,
    get_response_config,
    set_response_config,
)
from catchhook.store import RecordStore, StoreUnavailableError, get_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/response-config", tags=["response-config"])


@router.get("", response_model=ResponseConfig)
async def read_response_config(
    store: RecordStore = Depends(get_store),
):
    return await get_response_config(store)


@router.post("/set", response_model=ConfigUpdateResponse)
async def update_response_config(
    request: Request,
    store: RecordStore = Depends(get_store),
):
    """
    Body: {"statusCode": 201, "headers": {"X-Test": "1"}, "body": "", "delay": 50}
    statusCode outside 100-599 becomes 200, delay outside 0-30000 becomes 0.
    """
    body = await request.body()
    try:
        await set_response_config(store, body)
    except InvalidResponseConfigError as e:
        logger.info("Rejected response config: %s", str(e))
        raise HTTPException(status_code=400, detail="Invalid JSON format")
    except (StoreUnavailableError, SerializationError) as e:
        logger.error("Error saving response config to Redis: %s", str(e))
        raise HTTPException(status_code=500, detail="Error saving configuration")

    return ConfigUpdateResponse()
