"""Data model for the quick-open popup: tree nodes, history entries, result rows."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class BookmarkNode:
    """A bookmark or folder as seen in the bookmark tree at query time.

    A node without a url is a folder.
    """
    id: str
    title: str = ""
    url: Optional[str] = None
    parent_id: Optional[str] = None
    date_added: int = 0  # epoch ms, only used for "recent" listings

    @property
    def is_folder(self) -> bool:
        return self.url is None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookmarkNode":
        """Build a node from a chrome.bookmarks style dict (camelCase keys)."""
        url = data.get("url") or None
        parent_id = data.get("parentId")
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            url=url,
            parent_id=str(parent_id) if parent_id is not None else None,
            date_added=int(data.get("dateAdded") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"id": self.id, "title": self.title}
        if self.url is not None:
            result["url"] = self.url
        if self.parent_id is not None:
            result["parentId"] = self.parent_id
        return result


@dataclass
class HistoryEntry:
    """One clicked bookmark, keyed by url."""
    url: str
    title: str = ""
    last_click_time: int = 0
    click_count: int = 1
    id: Optional[str] = None
    parent_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """Parse a persisted history record."""
        return cls(
            url=data.get("url", ""),
            title=data.get("title") or "",
            last_click_time=int(data.get("lastClickTime") or 0),
            click_count=int(data.get("clickCount") or 1),
            id=data.get("id"),
            parent_id=data.get("parentId"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted record layout."""
        result: Dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "lastClickTime": self.last_click_time,
            "clickCount": self.click_count,
        }
        if self.id is not None:
            result["id"] = self.id
        if self.parent_id is not None:
            result["parentId"] = self.parent_id
        return result

    def to_node(self) -> BookmarkNode:
        return BookmarkNode(
            id=self.id or self.url,
            title=self.title,
            url=self.url,
            parent_id=self.parent_id,
        )


@dataclass(frozen=True)
class BookmarkRow:
    """A result row that opens a url when activated."""
    node: BookmarkNode
    history: Optional[HistoryEntry] = field(default=None, compare=False)
    kind: str = field(default="bookmark", init=False)

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def url(self) -> Optional[str]:
        return self.node.url

    def to_dict(self) -> Dict[str, Any]:
        result = {"kind": self.kind, **self.node.to_dict()}
        if self.history is not None:
            result["lastClickTime"] = self.history.last_click_time
            result["clickCount"] = self.history.click_count
        return result


@dataclass(frozen=True)
class FolderRow:
    """A result row that expands or collapses a folder when activated."""
    node: BookmarkNode
    is_expanded: bool = False
    kind: str = field(default="folder", init=False)

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def url(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **self.node.to_dict(), "expanded": self.is_expanded}


ResultRow = Union[BookmarkRow, FolderRow]
ResultList = List[ResultRow]
