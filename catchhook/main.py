"""
catchhook - webhook receiver backed by Redis.
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from catchhook.config import get_settings
from catchhook.api.router import api_router
from catchhook.store import RecordStore, StoreUnavailableError
from catchhook.utils.logging import (
    configure_structured_logging,
    generate_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger("catchhook")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Injects a correlation ID into every request context and response header."""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("X-Correlation-ID") or generate_correlation_id()
        set_correlation_id(cid)
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to Redis on startup (fatal if unreachable), close it on shutdown."""
    settings = get_settings()
    logger.info("catchhook starting up (env=%s)", settings.app_env)

    store = RecordStore.from_settings(settings)
    try:
        await store.ping()
    except StoreUnavailableError:
        logger.critical(
            "Failed to connect to Redis at %s:%d",
            settings.redis_host, settings.redis_port,
        )
        await store.close()
        raise
    logger.info("Successfully connected to Redis")
    app.state.store = store

    base = f"http://localhost:{settings.port}"
    logger.info("Starting webhook server on port %d", settings.port)
    logger.info("Dashboard: %s/", base)
    logger.info("Webhook endpoint: %s/webhook", base)
    logger.info("Health check: %s/health", base)
    logger.info("API endpoints: %s/api/webhooks", base)

    yield

    logger.info("catchhook shutting down")
    await store.close()


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    configure_structured_logging(settings.log_level)

    application = FastAPI(
        title="catchhook",
        description="Receive, store and inspect webhooks",
        version="1.0.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Correlation-ID", "Accept", "Origin"],
    )

    # Correlation ID middleware (added after CORS so it runs on every request)
    application.add_middleware(CorrelationIdMiddleware)

    application.include_router(api_router)

    return application


app = create_app()
