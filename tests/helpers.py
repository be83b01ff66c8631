"""Fake collaborators and node builders shared by the tests."""
import json

from quickmarks.models import BookmarkNode


class FakeTree:
    """In-memory bookmark tree with canned search results."""

    def __init__(self, results=None, children=None, recent=None):
        self.results = results or {}
        self.children = children or {}
        self.recent = recent or []
        self.search_calls = []
        self.children_calls = []

    async def search(self, text):
        self.search_calls.append(text)
        return list(self.results.get(text, []))

    async def get_children(self, folder_id):
        self.children_calls.append(folder_id)
        return list(self.children.get(folder_id, []))

    async def get_recent(self, count):
        return list(self.recent[:count])


class MemoryStore:
    """Dict-backed stand-in for the history store."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.writes = 0

    async def get(self, key, default=None):
        value = self.data.get(key, default)
        return json.loads(json.dumps(value))

    async def set(self, key, value):
        self.writes += 1
        self.data[key] = json.loads(json.dumps(value))


class FakeOpener:
    """Records tab and popup actions instead of performing them."""

    def __init__(self):
        self.opened = []
        self.closed = 0

    async def open_in_new_tab(self, url):
        self.opened.append(url)

    async def close_popup(self):
        self.closed += 1


def bookmark(id, title, url, parent_id="1"):
    return BookmarkNode(id=id, title=title, url=url, parent_id=parent_id)


def folder(id, title, parent_id="1"):
    return BookmarkNode(id=id, title=title, url=None, parent_id=parent_id)

