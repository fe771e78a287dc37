"""
API router — aggregates all route modules.
"""
from fastapi import APIRouter
from catchhook.api.webhooks import router as webhooks_router
from catchhook.api.response_config import router as response_config_router
from catchhook.api.health import router as health_router
from catchhook.api.dashboard import router as dashboard_router

api_router = APIRouter()
api_router.include_router(webhooks_router)
api_router.include_router(response_config_router)
api_router.include_router(health_router)
api_router.include_router(dashboard_router)
