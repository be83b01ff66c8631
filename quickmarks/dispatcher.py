"""Activation of result rows: open bookmarks, expand or collapse folders."""
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

from quickmarks.chrome_bridge import ChromeBridge
from quickmarks.expansion import FolderExpansionState
from quickmarks.history import HistoryRecorder
from quickmarks.models import BookmarkRow, FolderRow, ResultRow

BOOKMARK_MANAGER_URL = "chrome://bookmarks/"


class UrlOpener(Protocol):
    """Protocol for whatever opens tabs and dismisses the popup."""

    async def open_in_new_tab(self, url: str) -> None:
        ...

    async def close_popup(self) -> None:
        ...


class BridgeUrlOpener:
    """Opens tabs through the Chrome extension bridge."""

    def __init__(self, bridge: ChromeBridge):
        self.bridge = bridge

    async def open_in_new_tab(self, url: str) -> None:
        await self.bridge.open_tab(url)

    async def close_popup(self) -> None:
        await self.bridge.close_popup()


class Activation(str, Enum):
    OPENED = "opened"
    TOGGLED = "toggled"
    IGNORED = "ignored"
    FAILED = "failed"


class ActionDispatcher:
    """Performs the action bound to a row.

    Collaborator errors propagate to the caller, which decides how to report
    them; nothing is retried.
    """

    def __init__(
        self,
        recorder: HistoryRecorder,
        opener: UrlOpener,
        expansion: FolderExpansionState,
        refresh: Optional[Callable[[], Awaitable[object]]] = None,
    ):
        self.recorder = recorder
        self.opener = opener
        self.expansion = expansion
        self.refresh = refresh

    async def activate(self, row: Optional[ResultRow]) -> Activation:
        """Activate a row.

        Bookmark rows record the click, open the url and close the popup.
        Folder rows toggle expansion and recompose the list; if the
        recomposition raises, the previous expansion is restored.

        Args:
            row: Row to activate

        Returns:
            Which action was taken
        """
        if isinstance(row, FolderRow):
            previous = self.expansion.expanded_id
            self.expansion.toggle(row.id)
            if self.refresh is not None:
                try:
                    await self.refresh()
                except Exception:
                    self.expansion.expanded_id = previous
                    raise
            return Activation.TOGGLED

        if isinstance(row, BookmarkRow) and row.url:
            await self.recorder.record_click(row.node)
            await self.opener.open_in_new_tab(row.url)
            await self.opener.close_popup()
            return Activation.OPENED

        return Activation.IGNORED

    async def open_bookmark_manager(self) -> None:
        await self.opener.open_in_new_tab(BOOKMARK_MANAGER_URL)
        await self.opener.close_popup()
