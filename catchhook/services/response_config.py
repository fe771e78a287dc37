"""
Synthetic response configuration — stored in Redis with no TTL.

Reads never fail: a missing, unreadable or corrupt config decodes to
DEFAULT_RESPONSE_CONFIG. Writes are validated, clamped and then
overwrite the previous value (last write wins).
"""
import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from catchhook.schemas.response_config import ResponseConfig
from catchhook.store import RESPONSE_CONFIG_KEY, RecordStore, StoreUnavailableError

logger = logging.getLogger(__name__)

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 599
MAX_DELAY_MS = 30000

DEFAULT_RESPONSE_CONFIG = ResponseConfig(
    status_code=200,
    headers={"Content-Type": "application/json"},
    body="",
    delay=0,
)


class InvalidResponseConfigError(Exception):
    """Raised when a submitted config is not a well-formed JSON object."""
    pass


# RFC 7230 token characters
_HEADER_NAME_RE = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")


def is_sendable_header(name: str, value: str) -> bool:
    """
    True if the pair can go out on the wire as-is: a token name and a latin-1
    value with no control characters other than tab.
    """
    if not _HEADER_NAME_RE.fullmatch(name):
        return False
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return not any((ch < " " and ch != "\t") or ch == "\x7f" for ch in value)


def normalize_response_config(config: ResponseConfig) -> ResponseConfig:
    """Reset out-of-range status codes to 200 and out-of-range delays to 0."""
    updates = {}
    if not MIN_STATUS_CODE <= config.status_code <= MAX_STATUS_CODE:
        updates["status_code"] = 200
    if not 0 <= config.delay <= MAX_DELAY_MS:
        updates["delay"] = 0
    return config.model_copy(update=updates) if updates else config


def decode_response_config(raw: Optional[str]) -> ResponseConfig:
    """
    Decode a stored config. Every failure branch maps to DEFAULT_RESPONSE_CONFIG.
    """
    if raw is None:
        return DEFAULT_RESPONSE_CONFIG
    try:
        config = ResponseConfig.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(
            "Stored response config is invalid (%d errors), using default",
            e.error_count(),
        )
        return DEFAULT_RESPONSE_CONFIG
    return normalize_response_config(config)


def parse_response_config(raw_body: bytes) -> ResponseConfig:
    """Parse and validate a config submitted by an operator."""
    try:
        data = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidResponseConfigError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidResponseConfigError("Response config must be a JSON object")

    try:
        config = ResponseConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidResponseConfigError(f"Invalid response config: {e.error_count()} errors") from e

    for name, value in config.headers.items():
        if not is_sendable_header(name, value):
            raise InvalidResponseConfigError(f"Header {name!r} cannot be sent in an HTTP response")

    return normalize_response_config(config)


async def get_response_config(store: RecordStore) -> ResponseConfig:
    """Return the current config, or the default on any read failure."""
    try:
        raw = await store.get(RESPONSE_CONFIG_KEY)
    except StoreUnavailableError as e:
        logger.warning("Could not read response config, using default: %s", str(e))
        return DEFAULT_RESPONSE_CONFIG
    return decode_response_config(raw)


async def set_response_config(store: RecordStore, raw_body: bytes) -> ResponseConfig:
    """
    Validate and persist a new config.

    Raises InvalidResponseConfigError for malformed input (nothing is written)
    and StoreUnavailableError if Redis rejects the write.
    """
    config = parse_response_config(raw_body)
    await store.set(RESPONSE_CONFIG_KEY, config.to_json(), ttl=None)
    logger.info(
        "Webhook response configuration updated: status=%d delay=%dms",
        config.status_code, config.delay,
        extra={"status_code": config.status_code, "delay_ms": config.delay},
    )
    return config
