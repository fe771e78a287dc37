"""
Clear every indexed webhook and reset the index.
Records are deleted before the index so a failed run can simply be retried.
"""
import logging

from catchhook.store import INDEX_KEY, RecordStore, StoreUnavailableError

logger = logging.getLogger(__name__)


class PurgeError(Exception):
    """Raised when a purge step fails. `stage` names the step for the caller."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage


async def clear_webhooks(store: RecordStore) -> int:
    """Delete all indexed records, then the index. Returns how many keys were indexed."""
    try:
        keys = await store.index_range(0, -1)
    except StoreUnavailableError as e:
        raise PurgeError("read_index", str(e)) from e

    if keys:
        try:
            await store.delete(*keys)
        except StoreUnavailableError as e:
            raise PurgeError("delete_records", str(e)) from e

    try:
        await store.delete(INDEX_KEY)
    except StoreUnavailableError as e:
        raise PurgeError("delete_index", str(e)) from e

    logger.info("Cleared %d webhooks", len(keys), extra={"count": len(keys)})
    return len(keys)
