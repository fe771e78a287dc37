"""
Tests for catchhook/services/purge.py.
"""
import pytest

from catchhook.services.purge import PurgeError, clear_webhooks
from catchhook.store import INDEX_KEY


class TestClearWebhooks:
    async def test_deletes_records_then_index(self, fake_store, record_factory):
        for i in range(3):
            fake_store.add_record(record_factory(f"webhook:{i}"))

        count = await clear_webhooks(fake_store)

        assert count == 3
        assert fake_store.data == {}
        assert fake_store.index == []
        deletes = [c for c in fake_store.calls if c[0] == "delete"]
        assert deletes == [
            ("delete", "webhook:0", "webhook:1", "webhook:2"),
            ("delete", INDEX_KEY),
        ]

    async def test_reads_whole_index(self, fake_store):
        await clear_webhooks(fake_store)
        assert ("index_range", 0, -1) in fake_store.calls

    async def test_empty_index_is_noop_success(self, fake_store):
        assert await clear_webhooks(fake_store) == 0
        assert await clear_webhooks(fake_store) == 0

    async def test_leaves_unindexed_keys_alone(self, fake_store, record_factory):
        fake_store.add_record(record_factory("webhook:1"))
        fake_store.data["webhook:response:config"] = "{}"

        await clear_webhooks(fake_store)

        assert "webhook:response:config" in fake_store.data

    async def test_record_delete_failure_keeps_index(self, fake_store, record_factory):
        """A failed delete must not clear the index, so a retry can finish the job."""
        fake_store.add_record(record_factory("webhook:1"))
        fake_store.fail_on.add("delete")

        with pytest.raises(PurgeError) as exc_info:
            await clear_webhooks(fake_store)

        assert exc_info.value.stage == "delete_records"
        assert fake_store.index == ["webhook:1"]

    async def test_index_read_failure(self, fake_store):
        fake_store.fail_on.add("index_range")
        with pytest.raises(PurgeError) as exc_info:
            await clear_webhooks(fake_store)
        assert exc_info.value.stage == "read_index"

    async def test_retry_after_failure(self, fake_store, record_factory):
        fake_store.add_record(record_factory("webhook:1"))
        fake_store.fail_on.add("delete")
        with pytest.raises(PurgeError):
            await clear_webhooks(fake_store)

        fake_store.fail_on.clear()
        assert await clear_webhooks(fake_store) == 1
        assert fake_store.data == {}
