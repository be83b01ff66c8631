"""Read-only access to the browser bookmark tree."""
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol

from quickmarks.chrome_bridge import ChromeBridge
from quickmarks.models import BookmarkNode

ROOT_NAMES = ["bookmark_bar", "other", "synced"]

# Chrome stores times as microseconds since 1601-01-01
_WEBKIT_EPOCH_OFFSET_MS = 11644473600000


class BookmarkTree(Protocol):
    """Protocol for bookmark sources the popup can search."""

    async def search(self, text: str) -> List[BookmarkNode]:
        """Find bookmarks and folders matching text, in source order."""
        ...

    async def get_children(self, folder_id: str) -> List[BookmarkNode]:
        """List the direct children of a folder."""
        ...

    async def get_recent(self, count: int) -> List[BookmarkNode]:
        """List the most recently added bookmarks."""
        ...


def get_chrome_bookmarks_path(profile: str = "Default") -> Path:
    """Get the path to Chrome bookmarks file.

    Args:
        profile: Chrome profile name (default: "Default")

    Returns:
        Path to the Bookmarks file
    """
    home = Path.home()
    if os.name == "nt":  # Windows
        chrome_path = home / "AppData" / "Local" / "Google" / "Chrome" / "User Data" / profile / "Bookmarks"
    elif sys.platform == "darwin":  # macOS
        chrome_path = home / "Library" / "Application Support" / "Google" / "Chrome" / profile / "Bookmarks"
    elif os.name == "posix":  # Linux
        chrome_path = home / ".config" / "google-chrome" / profile / "Bookmarks"
        # Also check for chromium
        if not chrome_path.exists():
            chrome_path = home / ".config" / "chromium" / profile / "Bookmarks"
    else:
        raise OSError(f"Unsupported operating system: {os.name}")

    return chrome_path


def load_bookmarks_file(bookmarks_path: Path) -> Dict[str, Any]:
    """Load Chrome bookmarks JSON file.

    Raises:
        FileNotFoundError: If bookmarks file doesn't exist
        json.JSONDecodeError: If bookmarks file is malformed
    """
    if not bookmarks_path.exists():
        raise FileNotFoundError(f"Bookmarks file not found at {bookmarks_path}")

    with open(bookmarks_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _to_epoch_ms(webkit_time: Any) -> int:
    try:
        value = int(webkit_time)
    except (TypeError, ValueError):
        return 0
    if value <= 0:
        return 0
    return value // 1000 - _WEBKIT_EPOCH_OFFSET_MS


def _to_node(raw: Dict[str, Any], parent_id: Optional[str]) -> BookmarkNode:
    is_url = raw.get("type") == "url"
    return BookmarkNode(
        id=str(raw.get("id", "")),
        title=raw.get("name", ""),
        url=raw.get("url", "") if is_url else None,
        parent_id=parent_id,
        date_added=_to_epoch_ms(raw.get("date_added")),
    )


def _walk(node: Dict[str, Any]) -> Iterator[BookmarkNode]:
    """Yield every descendant of node in pre-order."""
    for child in node.get("children", []):
        yield _to_node(child, str(node.get("id", "")))
        if child.get("type") == "folder":
            yield from _walk(child)


def _find_folder(node: Dict[str, Any], folder_id: str) -> Optional[Dict[str, Any]]:
    if str(node.get("id")) == folder_id:
        return node
    for child in node.get("children", []):
        if child.get("type") == "folder":
            found = _find_folder(child, folder_id)
            if found is not None:
                return found
    return None


def matches(node: BookmarkNode, text: str) -> bool:
    """Check whether every term of text occurs in the node's title or url.

    Folders are matched on their title only.
    """
    terms = text.lower().split()
    if not terms:
        return False

    haystack = node.title.lower()
    if node.url:
        haystack = f"{haystack} {node.url.lower()}"

    return all(term in haystack for term in terms)


class ChromeFileBookmarkTree:
    """Bookmark tree backed by Chrome's Bookmarks JSON file.

    The file is re-read on each call so every lookup sees the current snapshot.
    """

    def __init__(self, bookmarks_path: Optional[Path] = None, profile: str = "Default"):
        self.bookmarks_path = bookmarks_path or get_chrome_bookmarks_path(profile)

    def _roots(self) -> List[Dict[str, Any]]:
        data = load_bookmarks_file(self.bookmarks_path)
        roots = data.get("roots", {})
        return [roots[name] for name in ROOT_NAMES if name in roots]

    def _all_nodes(self) -> Iterator[BookmarkNode]:
        for root in self._roots():
            yield from _walk(root)

    async def search(self, text: str) -> List[BookmarkNode]:
        return [node for node in self._all_nodes() if matches(node, text)]

    async def get_children(self, folder_id: str) -> List[BookmarkNode]:
        """List the direct children of a folder.

        Raises:
            KeyError: If no folder has this id
        """
        for root in self._roots():
            folder = _find_folder(root, folder_id)
            if folder is not None:
                return [_to_node(child, folder_id) for child in folder.get("children", [])]

        raise KeyError(f"Folder not found: {folder_id}")

    async def get_recent(self, count: int) -> List[BookmarkNode]:
        bookmarks = [node for node in self._all_nodes() if not node.is_folder]
        bookmarks.sort(key=lambda node: node.date_added, reverse=True)
        return bookmarks[:count]


class BridgeBookmarkTree:
    """Bookmark tree served live by the Chrome extension."""

    def __init__(self, bridge: ChromeBridge):
        self.bridge = bridge

    async def search(self, text: str) -> List[BookmarkNode]:
        results = await self.bridge.search(text)
        return [BookmarkNode.from_dict(item) for item in results]

    async def get_children(self, folder_id: str) -> List[BookmarkNode]:
        results = await self.bridge.get_children(folder_id)
        return [BookmarkNode.from_dict(item) for item in results]

    async def get_recent(self, count: int) -> List[BookmarkNode]:
        results = await self.bridge.get_recent(count)
        return [BookmarkNode.from_dict(item) for item in results]


class LiveBookmarkTree:
    """Use the extension when it is connected, the Bookmarks file otherwise."""

    def __init__(self, bridge: ChromeBridge, fallback: BookmarkTree):
        self.bridge = bridge
        self.live = BridgeBookmarkTree(bridge)
        self.fallback = fallback

    def _source(self) -> BookmarkTree:
        return self.live if self.bridge.is_connected else self.fallback

    async def search(self, text: str) -> List[BookmarkNode]:
        return await self._source().search(text)

    async def get_children(self, folder_id: str) -> List[BookmarkNode]:
        return await self._source().get_children(folder_id)

    async def get_recent(self, count: int) -> List[BookmarkNode]:
        return await self._source().get_recent(count)
