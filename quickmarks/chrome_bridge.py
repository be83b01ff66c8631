"""WebSocket bridge to the companion Chrome extension.

When the extension is connected, bookmark lookups run against Chrome's live
chrome.bookmarks API and tab/window actions are performed by the extension,
instead of reading the Bookmarks JSON file from disk.

Protocol:
  Server -> Extension:  {"id": "<uuid>", "action": "<cmd>", "params": {...}}
  Extension -> Server:  {"id": "<uuid>", "status": "ok"|"error", "result"|"error": ...}
"""
import asyncio
import json
import sys
import uuid
from typing import Any, Dict, List, Optional

import websockets
from websockets.asyncio.server import serve as ws_serve

DEFAULT_PORT = 8765
RESPONSE_TIMEOUT = 15.0  # seconds to wait for extension response


def popup_geometry(window: Dict[str, Any], width: int = 400, height: int = 500) -> Dict[str, int]:
    """Centre a fixed-size popup over a browser window.

    Args:
        window: Current window bounds with 'left', 'top', 'width', 'height'
        width: Popup width
        height: Popup height

    Returns:
        Bounds for the popup window
    """
    left = window.get("left", 0) + (window.get("width", width) - width) / 2
    top = window.get("top", 0) + (window.get("height", height) - height) / 2
    return {
        "left": round(left),
        "top": round(top),
        "width": width,
        "height": height,
    }


class ChromeBridge:
    """Async WebSocket server that proxies commands to the Chrome extension."""

    def __init__(self, port: int = DEFAULT_PORT):
        self.port = port
        self._ws: Optional[Any] = None
        self._server: Optional[Any] = None
        self._pending: Dict[str, asyncio.Future] = {}
        self._running = False
        self._connected = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the WebSocket server (non-blocking)."""
        try:
            self._server = await ws_serve(
                self._handler,
                "localhost",
                self.port,
            )
            self._running = True
            print(
                f"[ChromeBridge] WebSocket server listening on ws://localhost:{self.port}",
                file=sys.stderr,
            )
        except OSError as e:
            print(
                f"[ChromeBridge] Could not start WebSocket server on port {self.port}: {e}",
                file=sys.stderr,
            )

    async def stop(self) -> None:
        """Shut down the WebSocket server."""
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        self._running = False
        self._connected = False
        self._ws = None

    @property
    def is_connected(self) -> bool:
        """True if the Chrome extension is currently connected."""
        return self._ws is not None and self._connected

    @property
    def is_running(self) -> bool:
        """True if the WebSocket server is up (even if no client connected)."""
        return self._running

    # ------------------------------------------------------------------
    # WebSocket handler
    # ------------------------------------------------------------------

    async def _handler(self, websocket: Any) -> None:
        """Handle a single extension connection."""
        self._ws = websocket
        self._connected = True
        print("[ChromeBridge] Chrome extension connected", file=sys.stderr)

        try:
            async for raw in websocket:
                try:
                    msg = json.loads(raw)
                except json.JSONDecodeError:
                    continue

                # Keepalive / pong
                if msg.get("type") in ("keepalive", "pong"):
                    continue

                # Response to a pending command
                msg_id = msg.get("id")
                if msg_id and msg_id in self._pending:
                    self._pending[msg_id].set_result(msg)
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            print("[ChromeBridge] Chrome extension disconnected", file=sys.stderr)
            self._connected = False
            self._ws = None

    # ------------------------------------------------------------------
    # Send commands
    # ------------------------------------------------------------------

    async def _send_command(self, action: str, params: dict) -> Any:
        """Send a command to the extension and wait for the response.

        Raises:
            ConnectionError: Extension not connected.
            TimeoutError: Extension did not respond in time.
            RuntimeError: Extension returned an error.
        """
        if not self.is_connected:
            raise ConnectionError("Chrome extension is not connected")

        cmd_id = str(uuid.uuid4())
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[cmd_id] = future

        try:
            await self._ws.send(json.dumps({
                "id": cmd_id,
                "action": action,
                "params": params,
            }))

            response = await asyncio.wait_for(future, timeout=RESPONSE_TIMEOUT)

            if response.get("status") == "error":
                raise RuntimeError(response.get("error", "Unknown extension error"))

            return response.get("result", {})
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"Chrome extension did not respond to '{action}' within {RESPONSE_TIMEOUT}s"
            )
        finally:
            self._pending.pop(cmd_id, None)

    # ------------------------------------------------------------------
    # Bookmark lookups
    # ------------------------------------------------------------------

    async def search(self, text: str) -> List[dict]:
        """Run chrome.bookmarks.search in the extension."""
        return await self._send_command("search", {"query": text})

    async def get_children(self, folder_id: str) -> List[dict]:
        """Run chrome.bookmarks.getChildren in the extension."""
        return await self._send_command("getChildren", {"id": folder_id})

    async def get_recent(self, count: int) -> List[dict]:
        """Run chrome.bookmarks.getRecent in the extension."""
        return await self._send_command("getRecent", {"count": count})

    # ------------------------------------------------------------------
    # Tabs and windows
    # ------------------------------------------------------------------

    async def open_tab(self, url: str) -> dict:
        """Open a url in a new tab via chrome.tabs.create."""
        return await self._send_command("openTab", {"url": url})

    async def close_popup(self) -> dict:
        """Ask the extension to close the popup window."""
        return await self._send_command("closePopup", {})

    async def get_current_window(self) -> dict:
        """Get the bounds of the focused browser window."""
        return await self._send_command("getCurrentWindow", {})

    async def open_popup_window(self, width: int = 400, height: int = 500) -> dict:
        """Create the popup as its own window, centred on the current one."""
        window = await self.get_current_window()
        bounds = popup_geometry(window, width, height)
        return await self._send_command("createWindow", {
            "url": "popup.html",
            "type": "popup",
            "focused": True,
            **bounds,
        })


# ---------------------------------------------------------------------------
# Global singleton
# ---------------------------------------------------------------------------

_bridge: Optional[ChromeBridge] = None


def get_bridge() -> ChromeBridge:
    """Get or create the global bridge instance."""
    global _bridge
    if _bridge is None:
        from quickmarks.config import get_config
        port = get_config().bridge_port
        _bridge = ChromeBridge(port=port)
    return _bridge
