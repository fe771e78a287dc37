"""
Webhook ingestion — persist the request, index it, answer with the synthetic response.

Order matters:
1. Record write (24h TTL). Failure aborts the request.
2. Index push + trim. Failure is logged; the webhook still counts as received.
3. Response config lookup (falls back to the default, never fails).
4. Optional delay, then headers / status / body.
"""
import asyncio
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from catchhook.schemas.response_config import ResponseConfig
from catchhook.schemas.webhook import WebhookRecord, encode_body
from catchhook.services.response_config import get_response_config, is_sendable_header
from catchhook.store import RECORD_KEY_PREFIX, RecordStore, StoreUnavailableError

logger = logging.getLogger(__name__)

RECORD_TTL_SECONDS = 24 * 60 * 60
INDEX_MAX_ENTRIES = 1000

# Statuses that must not carry a response body
_BODYLESS_STATUSES = {204, 304}


class MethodNotAllowedError(Exception):
    """Raised when something other than POST reaches the ingestion path."""
    pass


class RecordKeyGenerator:
    """
    Issues webhook:<nanoseconds> keys that strictly increase within the process,
    even if the clock returns the same value twice.
    """

    def __init__(self, clock=time.time_ns):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_key(self) -> str:
        with self._lock:
            ns = self._clock()
            if ns <= self._last:
                ns = self._last + 1
            self._last = ns
        return f"{RECORD_KEY_PREFIX}{ns}"


_key_generator = RecordKeyGenerator()


def new_record_key() -> str:
    return _key_generator.next_key()


def canonical_header_name(name: str) -> str:
    """x-github-event -> X-Github-Event"""
    return "-".join(part.capitalize() for part in name.split("-"))


def collect_headers(items: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Group header values by canonical name, keeping arrival order."""
    headers: dict[str, list[str]] = {}
    for name, value in items:
        headers.setdefault(canonical_header_name(name), []).append(value)
    return headers


@dataclass(frozen=True)
class SyntheticResponse:
    status_code: int
    key: str
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


def default_response_body(key: str) -> str:
    return json.dumps(
        {"status": "success", "message": "Webhook received and saved", "key": key},
        separators=(",", ":"),
    )


def build_synthetic_response(config: ResponseConfig, key: str) -> SyntheticResponse:
    """Apply configured headers, status and body for a stored webhook."""
    headers = {}
    for name, value in config.headers.items():
        if is_sendable_header(name, value):
            headers[name] = value
        else:
            logger.warning(
                "Dropping response header %r that cannot be sent", name,
                extra={"webhook_key": key},
            )
    if not any(name.lower() == "content-type" for name in headers):
        headers["Content-Type"] = "application/json"

    status_code = config.status_code
    if status_code < 200 or status_code in _BODYLESS_STATUSES:
        body = b""
    else:
        body = (config.body or default_response_body(key)).encode("utf-8")

    return SyntheticResponse(status_code=status_code, key=key, body=body, headers=headers)


async def ingest_webhook(
    store: RecordStore,
    method: str,
    headers: Iterable[tuple[str, str]],
    url: str,
    body: bytes,
) -> SyntheticResponse:
    """
    Store one inbound webhook and build the response for its sender.

    Raises MethodNotAllowedError for non-POST requests, StoreUnavailableError
    or SerializationError if the record itself cannot be saved.
    """
    if method.upper() != "POST":
        raise MethodNotAllowedError(f"{method} not allowed")

    key = new_record_key()
    stored_body, body_encoding = encode_body(body)
    record = WebhookRecord(
        id=key,
        timestamp=datetime.now(timezone.utc),
        headers=collect_headers(headers),
        body=stored_body,
        body_encoding=body_encoding,
        method="POST",
        url=url,
    )

    await store.set(key, record.to_json(), ttl=RECORD_TTL_SECONDS)

    try:
        await store.push_index(key, INDEX_MAX_ENTRIES)
    except StoreUnavailableError as e:
        logger.warning(
            "Error adding %s to webhooks list: %s", key, str(e),
            extra={"webhook_key": key},
        )

    logger.info("Webhook received and saved with key: %s", key, extra={"webhook_key": key})

    config = await get_response_config(store)
    if config.delay > 0:
        await asyncio.sleep(config.delay / 1000)

    return build_synthetic_response(config, key)
