"""
JSON log lines tagged with the request's correlation ID.

Each line carries timestamp, level, service, correlation_id, logger and message,
plus any of EXTRA_FIELDS passed through `extra=`. The correlation ID lives in a
contextvar set by CorrelationIdMiddleware, so every log call made while
handling a request is tagged without passing it around.
"""
import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

SERVICE_NAME = "catchhook"

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

EXTRA_FIELDS = ("webhook_key", "status_code", "delay_ms", "count")


def get_correlation_id() -> Optional[str]:
    return correlation_id_ctx.get()


def set_correlation_id(cid: str) -> None:
    correlation_id_ctx.set(cid)


def generate_correlation_id() -> str:
    """UUID4 hex, 32 chars."""
    return uuid.uuid4().hex


class StructuredJsonFormatter(logging.Formatter):
    """
    {"timestamp": "...", "level": "INFO", "service": "catchhook",
     "correlation_id": "...", "logger": "catchhook.store", "message": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%S.%fZ"
            ),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "correlation_id": get_correlation_id(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, getattr(record, key))
            for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        return json.dumps(entry, default=str)


def configure_structured_logging(log_level: str = "INFO") -> None:
    """
    Install one stdout JSON handler on the root logger.

    Uvicorn is started with log_config=None, so its loggers are stripped of
    their own handlers and propagate here as well.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    # Access lines duplicate what the handlers already log
    for noisy in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
