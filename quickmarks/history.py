"""Click history: loading, lookup and the record-click update."""
import asyncio
import time
from typing import Callable, Dict, List, Optional, Protocol

from quickmarks.history_store import HISTORY_KEY
from quickmarks.models import BookmarkNode, HistoryEntry

DEFAULT_HISTORY_LIMIT = 100


class KeyValueStore(Protocol):
    async def get(self, key: str, default=None): ...

    async def set(self, key: str, value) -> None: ...


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


async def load_history(store: KeyValueStore) -> List[HistoryEntry]:
    """Read the click history, most recent first."""
    records = await store.get(HISTORY_KEY, [])
    return [HistoryEntry.from_dict(record) for record in records or [] if record.get("url")]


def index_by_url(history: List[HistoryEntry]) -> Dict[str, HistoryEntry]:
    return {entry.url: entry for entry in history}


def apply_click(
    history: List[HistoryEntry],
    bookmark: BookmarkNode,
    timestamp: int,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> List[HistoryEntry]:
    """Return the history updated with one click on bookmark.

    An existing entry for the url is refreshed in place and its count bumped;
    otherwise a new entry is put at the front. The result is sorted by last
    click time (newest first) and cut to `limit` entries.
    """
    updated = list(history)
    existing = next((i for i, entry in enumerate(updated) if entry.url == bookmark.url), None)

    if existing is not None:
        previous = updated[existing]
        updated[existing] = HistoryEntry(
            url=bookmark.url,
            title=bookmark.title or previous.title,
            last_click_time=timestamp,
            click_count=(previous.click_count or 0) + 1,
            id=bookmark.id or previous.id,
            parent_id=bookmark.parent_id or previous.parent_id,
        )
    else:
        updated.insert(0, HistoryEntry(
            url=bookmark.url,
            title=bookmark.title,
            last_click_time=timestamp,
            click_count=1,
            id=bookmark.id,
            parent_id=bookmark.parent_id,
        ))

    updated.sort(key=lambda entry: entry.last_click_time, reverse=True)
    return updated[:limit]


class HistoryRecorder:
    """Records bookmark clicks into the history store.

    Calls are serialized so that overlapping clicks each count once.
    """

    def __init__(
        self,
        store: KeyValueStore,
        limit: int = DEFAULT_HISTORY_LIMIT,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.store = store
        self.limit = limit
        self.clock = clock or now_ms
        self._lock = asyncio.Lock()

    async def load(self) -> List[HistoryEntry]:
        return await load_history(self.store)

    async def record_click(self, bookmark: BookmarkNode) -> List[HistoryEntry]:
        """Record one click and persist the updated history.

        Args:
            bookmark: The bookmark that was opened

        Returns:
            The history as written
        """
        async with self._lock:
            history = await load_history(self.store)
            updated = apply_click(history, bookmark, self.clock(), self.limit)
            await self.store.set(HISTORY_KEY, [entry.to_dict() for entry in updated])
            return updated
