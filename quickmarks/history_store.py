"""SQLite key/value store for popup state such as the click history."""
import json
import aiosqlite
from pathlib import Path
from typing import Any, Optional


# Default database location
DEFAULT_DB_PATH = Path.home() / ".quickmarks" / "history.db"

HISTORY_KEY = "bookmarkHistory"


class HistoryStore:
    """Async SQLite store holding named JSON records.

    Each record is replaced wholesale on write; there are no partial updates.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database. Defaults to ~/.quickmarks/history.db.
                Pass ":memory:" for a throwaway database.
        """
        self.db_path = db_path or DEFAULT_DB_PATH
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS popup_storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)

        await self._connection.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get(self, key: str, default: Any = None) -> Any:
        """Read a record.

        Args:
            key: Record name
            default: Value returned when the record is missing or unreadable

        Returns:
            Decoded JSON value
        """
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        cursor = await self._connection.execute(
            "SELECT value FROM popup_storage WHERE key = ?",
            (key,)
        )
        row = await cursor.fetchone()

        if row is None:
            return default

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            return default

    async def set(self, key: str, value: Any) -> None:
        """Replace a record in a single statement.

        Args:
            key: Record name
            value: JSON-serializable value
        """
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        await self._connection.execute("""
            INSERT INTO popup_storage (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """, (key, json.dumps(value)))

        await self._connection.commit()


# Global store instance
_history_store: Optional[HistoryStore] = None


async def get_history_store() -> HistoryStore:
    """Get or create the global history store instance.

    Returns:
        Initialized HistoryStore
    """
    global _history_store

    if _history_store is None:
        from quickmarks.config import get_config
        _history_store = HistoryStore(get_config().history_db_path)
        await _history_store.initialize()

    return _history_store
