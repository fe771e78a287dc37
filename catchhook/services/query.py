"""
Webhook listing — read the recency index, hydrate records, filter, sort.

Over-fetches 2x the limit from the index so filtering and expired
records still leave enough results. Records that have expired or fail
to decode are skipped, never surfaced as errors.
"""
import json
import logging
from typing import Optional

from catchhook.schemas.webhook import SerializationError, WebhookListResponse, WebhookRecord
from catchhook.store import RecordStore, StoreUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 500
DEFAULT_SORT = "timestamp-desc"

SORT_KEYS = {
    "timestamp-asc": (lambda w: w.timestamp, False),
    "timestamp-desc": (lambda w: w.timestamp, True),
    "method": (lambda w: w.method, False),
    "url": (lambda w: w.url, False),
}


def parse_limit(raw: Optional[str]) -> int:
    """Missing, non-numeric or non-positive -> 100; capped at 500."""
    if not raw:
        return DEFAULT_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        return DEFAULT_LIMIT
    if limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def matches_search(webhook: WebhookRecord, term: str) -> bool:
    """Case-insensitive substring match on body, headers, url and method."""
    if not term:
        return True
    term = term.lower()
    haystacks = (
        webhook.body,
        json.dumps(webhook.headers, ensure_ascii=False),
        webhook.url,
        webhook.method,
    )
    return any(term in h.lower() for h in haystacks)


def sort_webhooks(webhooks: list[WebhookRecord], sort: str) -> list[WebhookRecord]:
    """Sort by a known key; unknown keys keep index order (newest first)."""
    if sort not in SORT_KEYS:
        return list(webhooks)
    key_fn, reverse = SORT_KEYS[sort]
    return sorted(webhooks, key=key_fn, reverse=reverse)


async def _load_record(store: RecordStore, key: str) -> Optional[WebhookRecord]:
    try:
        raw = await store.get(key)
    except StoreUnavailableError as e:
        logger.warning("Error getting webhook data for key %s: %s", key, str(e))
        return None
    if raw is None:
        logger.debug("Webhook %s expired, skipping", key)
        return None
    try:
        return WebhookRecord.from_json(raw)
    except SerializationError as e:
        logger.warning("Error decoding webhook data for key %s: %s", key, str(e))
        return None


async def list_webhooks(
    store: RecordStore,
    limit: int = DEFAULT_LIMIT,
    search: str = "",
    sort: str = DEFAULT_SORT,
) -> WebhookListResponse:
    """
    Return up to `limit` matching webhooks plus how many index entries were read.

    Raises StoreUnavailableError if the index itself cannot be read.
    """
    keys = await store.index_range(0, limit * 2 - 1)

    webhooks: list[WebhookRecord] = []
    for key in keys:
        webhook = await _load_record(store, key)
        if webhook is None or not matches_search(webhook, search):
            continue
        webhooks.append(webhook)
        if len(webhooks) >= limit:
            break

    webhooks = sort_webhooks(webhooks, sort or DEFAULT_SORT)
    return WebhookListResponse(webhooks=webhooks, count=len(webhooks), total=len(keys))
