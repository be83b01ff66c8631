"""MCP server exposing the bookmark quick-open popup."""
import json
import sys
from typing import Any, Awaitable, Callable, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from quickmarks.bookmark_tree import ChromeFileBookmarkTree, LiveBookmarkTree
from quickmarks.chrome_bridge import get_bridge
from quickmarks.composer import ResultComposer
from quickmarks.config import get_config
from quickmarks.dispatcher import BridgeUrlOpener
from quickmarks.history import HistoryRecorder
from quickmarks.history_store import get_history_store
from quickmarks.session import PopupSession


SessionFactory = Callable[[], Awaitable[PopupSession]]

# Global state
_session: Optional[PopupSession] = None


async def create_session() -> PopupSession:
    """Build a popup session wired to the configured collaborators."""
    config = get_config()
    bridge = get_bridge()
    store = await get_history_store()

    tree = LiveBookmarkTree(
        bridge,
        ChromeFileBookmarkTree(config.bookmarks_path, profile=config.chrome_profile),
    )
    composer = ResultComposer(tree, store, ranking=config.ranking)
    recorder = HistoryRecorder(store, limit=config.history_limit)

    return PopupSession(
        composer,
        recorder,
        BridgeUrlOpener(bridge),
        include_folders=config.include_folders,
    )


async def get_session(factory: SessionFactory = create_session) -> PopupSession:
    """Get the open popup session, starting a new one if the last was closed.

    A new session starts on the empty query, i.e. the click history.
    """
    global _session

    if _session is None or _session.closed:
        _session = await factory()
        await _session.refresh()

    return _session


def _text(payload: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


TOOLS = [
    Tool(
        name="health_check",
        description="Report whether the Chrome extension is connected and how much click history is stored.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="search_bookmarks",
        description="Type a query into the popup search box. An empty query shows recently clicked bookmarks. Returns the popup state with the ranked rows.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search box text"
                },
                "include_folders": {
                    "type": "boolean",
                    "description": "Show matching folders above bookmarks"
                }
            },
            "required": ["query"]
        },
    ),
    Tool(
        name="toggle_folder_mode",
        description="Toggle whether folders are included in search results.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="press_key",
        description="Send a key to the popup: ArrowDown, ArrowUp, Enter or Escape.",
        inputSchema={
            "type": "object",
            "properties": {
                "key": {
                    "type": "string",
                    "enum": ["ArrowDown", "ArrowUp", "Enter", "Escape"]
                }
            },
            "required": ["key"]
        },
    ),
    Tool(
        name="hover_row",
        description="Move the pointer over a row (0-based index).",
        inputSchema={
            "type": "object",
            "properties": {"index": {"type": "integer"}},
            "required": ["index"]
        },
    ),
    Tool(
        name="pointer_left",
        description="Move the pointer off the current row.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="activate_row",
        description="Click a row: open a bookmark or expand/collapse a folder. Defaults to the selected row.",
        inputSchema={
            "type": "object",
            "properties": {"index": {"type": "integer"}},
        },
    ),
    Tool(
        name="get_popup_state",
        description="Return the current query, rows and selection.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="get_click_history",
        description="Return the stored bookmark click history, most recent first.",
        inputSchema={
            "type": "object",
            "properties": {"limit": {"type": "integer", "default": 100}},
        },
    ),
    Tool(
        name="open_bookmark_manager",
        description="Open chrome://bookmarks/ in a new tab and close the popup.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="open_popup_window",
        description="Open the popup as a window centred on the current browser window.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="close_popup",
        description="Close the popup, discarding the query and folder state.",
        inputSchema={"type": "object", "properties": {}},
    ),
]


def create_server(session_factory: SessionFactory = create_session) -> Server:
    """Create and configure the MCP server.

    Args:
        session_factory: Builds a fresh PopupSession when none is open

    Returns:
        Configured Server instance
    """
    server = Server("quickmarks-popup")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        arguments = arguments or {}

        if name == "health_check":
            bridge = get_bridge()
            session = await get_session(session_factory)
            history = await session.dispatcher.recorder.load()
            return _text({
                "bridge_running": bridge.is_running,
                "bridge_connected": bridge.is_connected,
                "history_entries": len(history),
            })

        if name == "open_popup_window":
            config = get_config()
            try:
                result = await get_bridge().open_popup_window(config.popup_width, config.popup_height)
            except (ConnectionError, TimeoutError, RuntimeError) as e:
                return _text({"error": str(e)})
            return _text(result)

        session = await get_session(session_factory)

        if name == "search_bookmarks":
            if "include_folders" in arguments:
                session.include_folders = bool(arguments["include_folders"])
            await session.set_query(arguments.get("query", ""))
            return _text(session.snapshot())
        elif name == "toggle_folder_mode":
            await session.toggle_include_folders()
            return _text(session.snapshot())
        elif name == "press_key":
            key = arguments.get("key", "")
            outcome = await session.press_key(key)
            return _text({"outcome": outcome.value, "state": session.snapshot()})
        elif name == "hover_row":
            session.hover(int(arguments.get("index", -1)))
            return _text(session.snapshot())
        elif name == "pointer_left":
            session.pointer_left()
            return _text(session.snapshot())
        elif name == "activate_row":
            index = arguments.get("index")
            row = None
            if index is None:
                index = session.selection.index
            if 0 <= index < len(session.rows):
                row = session.rows[index]
            activation = await session.activate(index)
            payload = {"activation": activation.value, "state": session.snapshot()}
            if row is not None and row.url:
                payload["url"] = row.url
            return _text(payload)
        elif name == "get_popup_state":
            return _text(session.snapshot())
        elif name == "get_click_history":
            limit = int(arguments.get("limit", 100))
            history = await session.dispatcher.recorder.load()
            return _text([entry.to_dict() for entry in history[:limit]])
        elif name == "open_bookmark_manager":
            opened = await session.open_bookmark_manager()
            return _text({"opened": opened})
        elif name == "close_popup":
            await session.close()
            return _text({"closed": True})
        else:
            raise ValueError(f"Unknown tool: {name}")

    return server


async def main():
    """Main entry point for the MCP server."""
    bridge = get_bridge()
    await bridge.start()

    server = create_server()

    try:
        async with stdio_server() as (read_stream, write_stream):
            initialization_options = server.create_initialization_options()
            await server.run(read_stream, write_stream, initialization_options)
    finally:
        await bridge.stop()
        print("[Server] Stopped", file=sys.stderr)
