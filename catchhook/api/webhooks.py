"""
Webhook endpoints.

- POST /webhook               receive and store any payload
- GET  /api/webhooks          list / search / sort stored webhooks
- GET  /webhooks              legacy alias of /api/webhooks
- POST /api/webhooks/clear    delete everything in the index
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from catchhook.schemas.webhook import ClearResponse, SerializationError, WebhookListResponse
from catchhook.services.ingestion import MethodNotAllowedError, ingest_webhook
from catchhook.services.purge import PurgeError, clear_webhooks
from catchhook.services.query import DEFAULT_SORT, list_webhooks, parse_limit
from catchhook.store import RecordStore, StoreUnavailableError, get_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])

_PURGE_FAILURE_DETAIL = {
    "read_index": "Error retrieving webhooks",
    "delete_records": "Error clearing webhooks",
    "delete_index": "Error clearing webhooks list",
}


def _request_url(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    store: RecordStore = Depends(get_store),
):
    """Store the raw request and answer with the configured synthetic response."""
    body = await request.body()
    try:
        result = await ingest_webhook(
            store,
            method=request.method,
            headers=request.headers.items(),
            url=_request_url(request),
            body=body,
        )
    except MethodNotAllowedError:
        raise HTTPException(status_code=405, detail="Method not allowed")
    except (StoreUnavailableError, SerializationError) as e:
        logger.error("Error saving webhook: %s", str(e))
        raise HTTPException(status_code=500, detail="Error saving webhook data")

    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )


@router.get("/api/webhooks", response_model=WebhookListResponse)
@router.get("/webhooks", response_model=WebhookListResponse)
async def get_webhooks(
    limit: Optional[str] = Query(None),
    search: str = Query(""),
    sort: str = Query(DEFAULT_SORT),
    store: RecordStore = Depends(get_store),
):
    """List recent webhooks. limit defaults to 100 (max 500), sort to timestamp-desc."""
    try:
        return await list_webhooks(store, limit=parse_limit(limit), search=search, sort=sort)
    except StoreUnavailableError as e:
        logger.error("Error getting webhooks list: %s", str(e))
        raise HTTPException(status_code=500, detail="Error retrieving webhooks")


@router.post("/api/webhooks/clear", response_model=ClearResponse)
async def clear_all_webhooks(
    store: RecordStore = Depends(get_store),
):
    try:
        count = await clear_webhooks(store)
    except PurgeError as e:
        logger.error("Webhook purge failed at %s: %s", e.stage, str(e))
        raise HTTPException(status_code=500, detail=_PURGE_FAILURE_DETAIL[e.stage])

    return ClearResponse(message=f"Cleared {count} webhooks", count=count)
