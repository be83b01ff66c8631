"""State of one open popup and the handlers that drive it."""
import sys
from typing import Any, Dict, Optional

from quickmarks.composer import ResultComposer
from quickmarks.dispatcher import Activation, ActionDispatcher, UrlOpener
from quickmarks.expansion import FolderExpansionState
from quickmarks.history import HistoryRecorder
from quickmarks.models import ResultList
from quickmarks.selection import KeyOutcome, SelectionController


class PopupSession:
    """Owns the query, the folder toggle, the rows and the selection cursor.

    Every composition takes a new request token. A composition that finishes
    after a newer one was started is dropped, so fast typing never ends with
    an older result list on screen. Failed compositions leave the current
    rows and selection untouched.
    """

    def __init__(
        self,
        composer: ResultComposer,
        recorder: HistoryRecorder,
        opener: UrlOpener,
        include_folders: bool = False,
    ):
        self.composer = composer
        self.opener = opener
        self.query = ""
        self.include_folders = include_folders
        self.rows: ResultList = []
        self.expansion = FolderExpansionState()
        self.selection = SelectionController()
        self.dispatcher = ActionDispatcher(recorder, opener, self.expansion, refresh=self.recompose)
        self.closed = False
        self._latest_token = 0

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Recompose the rows for the current query and flags.

        Returns:
            True if the new rows were applied
        """
        try:
            return await self.recompose()
        except Exception as e:
            print(f"[PopupSession] Search for {self.query!r} failed: {e}", file=sys.stderr)
            return False

    async def recompose(self) -> bool:
        """Like refresh, but collaborator errors propagate to the caller.

        Returns:
            True if the new rows were applied, False if they were stale
            or the popup was closed meanwhile
        """
        self._latest_token += 1
        token = self._latest_token

        rows = await self.composer.compose(
            self.query,
            expanded_id=self.expansion.expanded_id,
            include_folders=self.include_folders,
        )

        if token != self._latest_token:
            print(f"[PopupSession] Dropping stale results for {self.query!r}", file=sys.stderr)
            return False

        if self.closed:
            return False

        self.rows = rows
        self.selection.reset(len(rows))
        return True

    async def set_query(self, query: str) -> bool:
        self.query = query
        return await self.refresh()

    async def toggle_include_folders(self) -> bool:
        self.include_folders = not self.include_folders
        return await self.refresh()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    async def press_key(self, key: str) -> KeyOutcome:
        """Handle a key press from the popup."""
        outcome = self.selection.handle_key(key)

        if outcome == KeyOutcome.ACTIVATE:
            await self.activate(self.selection.index)
        elif outcome == KeyOutcome.CLOSE:
            await self.close()

        return outcome

    def hover(self, index: int) -> int:
        return self.selection.hover(index)

    def pointer_left(self) -> None:
        self.selection.pointer_left()

    async def activate(self, index: Optional[int] = None) -> Activation:
        """Activate the row at index, or the selected row.

        Returns:
            Which action was taken; FAILED if a collaborator raised
        """
        if index is None:
            index = self.selection.index
        if not 0 <= index < len(self.rows):
            return Activation.IGNORED

        row = self.rows[index]
        try:
            result = await self.dispatcher.activate(row)
        except Exception as e:
            print(f"[PopupSession] Could not activate row {index}: {e}", file=sys.stderr)
            return Activation.FAILED

        if result == Activation.OPENED:
            self._mark_closed()
        return result

    async def activate_selected(self) -> Activation:
        return await self.activate(self.selection.index)

    async def open_bookmark_manager(self) -> bool:
        try:
            await self.dispatcher.open_bookmark_manager()
        except Exception as e:
            print(f"[PopupSession] Could not open bookmark manager: {e}", file=sys.stderr)
            return False

        self._mark_closed()
        return True

    async def close(self) -> None:
        """Close the popup. Pending compositions are discarded."""
        self._mark_closed()
        try:
            await self.opener.close_popup()
        except Exception as e:
            print(f"[PopupSession] Could not close popup: {e}", file=sys.stderr)

    def _mark_closed(self) -> None:
        self.closed = True
        self.expansion.reset()

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        """Current state as a JSON-serializable dict."""
        return {
            "query": self.query,
            "includeFolders": self.include_folders,
            "expandedFolderId": self.expansion.expanded_id,
            "selectedIndex": self.selection.index,
            "closed": self.closed,
            "rows": [
                {"index": i, **row.to_dict()}
                for i, row in enumerate(self.rows)
            ],
        }
