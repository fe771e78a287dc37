"""
Browser dashboard. The page is static; it calls the JSON API from the client.
"""
import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["dashboard"])

_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / "dashboard.html"


@router.get("/", response_class=HTMLResponse)
@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard():
    try:
        content = await asyncio.to_thread(_TEMPLATE_PATH.read_text, encoding="utf-8")
    except OSError as e:
        logger.error("Error loading dashboard template: %s", str(e))
        raise HTTPException(status_code=500, detail="Error loading dashboard")
    return HTMLResponse(content=content, status_code=200)
