"""Tests for history_store module."""
import pytest
import pytest_asyncio

from quickmarks.history import HistoryRecorder, load_history
from quickmarks.history_store import HISTORY_KEY, HistoryStore

from helpers import bookmark


@pytest_asyncio.fixture
async def store(history_db_path):
    """Create and initialize a test history store."""
    s = HistoryStore(history_db_path)
    await s.initialize()
    yield s
    await s.close()


@pytest.mark.asyncio
class TestHistoryStore:
    async def test_initialize_creates_db(self, history_db_path):
        store = HistoryStore(history_db_path)
        await store.initialize()
        assert history_db_path.exists()
        await store.close()

    async def test_get_missing_returns_default(self, store):
        assert await store.get(HISTORY_KEY, []) == []
        assert await store.get("nothing") is None

    async def test_set_and_get(self, store):
        records = [{"url": "a.com", "title": "A", "lastClickTime": 5, "clickCount": 1}]
        await store.set(HISTORY_KEY, records)
        assert await store.get(HISTORY_KEY) == records

    async def test_set_replaces_whole_value(self, store):
        await store.set(HISTORY_KEY, [{"url": "a.com"}, {"url": "b.com"}])
        await store.set(HISTORY_KEY, [{"url": "c.com"}])
        assert await store.get(HISTORY_KEY) == [{"url": "c.com"}]

    async def test_persists_across_connections(self, history_db_path):
        first = HistoryStore(history_db_path)
        await first.initialize()
        await first.set(HISTORY_KEY, [{"url": "a.com", "clickCount": 2}])
        await first.close()

        second = HistoryStore(history_db_path)
        await second.initialize()
        assert await second.get(HISTORY_KEY) == [{"url": "a.com", "clickCount": 2}]
        await second.close()

    async def test_uninitialized_raises(self, history_db_path):
        store = HistoryStore(history_db_path)
        with pytest.raises(RuntimeError, match="not initialized"):
            await store.get(HISTORY_KEY)
        with pytest.raises(RuntimeError, match="not initialized"):
            await store.set(HISTORY_KEY, [])

    async def test_in_memory_database(self):
        store = HistoryStore(":memory:")
        await store.initialize()
        await store.set(HISTORY_KEY, [{"url": "a.com"}])
        assert await store.get(HISTORY_KEY) == [{"url": "a.com"}]
        await store.close()

    async def test_recorder_round_trip(self, store):
        recorder = HistoryRecorder(store, clock=lambda: 1234)
        await recorder.record_click(bookmark("1", "Python Docs", "https://docs.python.org"))
        history = await load_history(store)
        assert len(history) == 1
        assert history[0].title == "Python Docs"
        assert history[0].click_count == 1
        assert history[0].last_click_time == 1234
