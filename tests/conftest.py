"""Shared fixtures for tests."""
import json
import pytest
from pathlib import Path

from helpers import FakeOpener, MemoryStore


SAMPLE_BOOKMARKS = {
    "checksum": "test",
    "roots": {
        "bookmark_bar": {
            "children": [
                {
                    "id": "1",
                    "name": "Python Docs",
                    "type": "url",
                    "url": "https://docs.python.org",
                    "date_added": "13300000000000000"
                },
                {
                    "id": "2",
                    "name": "Work",
                    "type": "folder",
                    "children": [
                        {
                            "id": "3",
                            "name": "Jira Board",
                            "type": "url",
                            "url": "https://jira.example.com/board",
                            "date_added": "13300000300000000"
                        },
                        {
                            "id": "4",
                            "name": "Confluence",
                            "type": "url",
                            "url": "https://confluence.example.com",
                            "date_added": "13300000100000000"
                        }
                    ]
                },
                {
                    "id": "5",
                    "name": "Tutorials",
                    "type": "folder",
                    "children": [
                        {
                            "id": "6",
                            "name": "SQLite Guide",
                            "type": "url",
                            "url": "https://sqlite.org/guide",
                            "date_added": "13300000200000000"
                        },
                        {
                            "id": "8",
                            "name": "Work Recipes",
                            "type": "folder",
                            "children": []
                        }
                    ]
                }
            ],
            "id": "0",
            "name": "Bookmarks Bar",
            "type": "folder"
        },
        "other": {
            "children": [
                {
                    "id": "7",
                    "name": "Stack Overflow",
                    "type": "url",
                    "url": "https://stackoverflow.com"
                }
            ],
            "id": "100",
            "name": "Other Bookmarks",
            "type": "folder"
        },
        "synced": {
            "children": [],
            "id": "200",
            "name": "Mobile Bookmarks",
            "type": "folder"
        }
    },
    "version": 1
}


@pytest.fixture
def sample_bookmarks_path(tmp_path):
    """Create a temporary bookmarks file with sample data."""
    bookmarks_file = tmp_path / "Bookmarks"
    bookmarks_file.write_text(json.dumps(SAMPLE_BOOKMARKS, indent=3))
    return bookmarks_file


@pytest.fixture
def history_records():
    """Two history records, most recent first."""
    return [
        {"url": "a.com", "title": "A", "clickCount": 3, "lastClickTime": 500},
        {"url": "b.com", "title": "B", "clickCount": 1, "lastClickTime": 100},
    ]


@pytest.fixture
def memory_store(history_records):
    return MemoryStore({"bookmarkHistory": history_records})


@pytest.fixture
def opener():
    return FakeOpener()


@pytest.fixture
def history_db_path(tmp_path):
    """Return path for a temporary history database."""
    return tmp_path / "test_history.db"
