"""Tests for the Chrome extension WebSocket bridge."""
import json
import pytest
from unittest.mock import AsyncMock

from quickmarks.chrome_bridge import ChromeBridge, popup_geometry


class TestPopupGeometry:
    def test_centred_on_window(self):
        window = {"left": 100, "top": 50, "width": 1200, "height": 900}
        assert popup_geometry(window, 400, 500) == {
            "left": 500, "top": 250, "width": 400, "height": 500,
        }

    def test_rounds_half_pixels(self):
        window = {"left": 0, "top": 0, "width": 1001, "height": 801}
        bounds = popup_geometry(window, 400, 500)
        assert isinstance(bounds["left"], int)
        assert bounds["left"] in (300, 301)


class TestBridgeLifecycle:
    @pytest.mark.asyncio
    async def test_starts_and_stops(self):
        """Bridge starts a WebSocket server and stops cleanly."""
        bridge = ChromeBridge(port=0)  # port 0 = OS picks available port
        await bridge.start()
        assert bridge.is_running
        assert not bridge.is_connected
        await bridge.stop()
        assert not bridge.is_running

    @pytest.mark.asyncio
    async def test_not_connected_by_default(self):
        bridge = ChromeBridge(port=0)
        assert not bridge.is_connected
        assert not bridge.is_running


class TestBridgeCommands:
    @pytest.mark.asyncio
    async def test_send_command_not_connected_raises(self):
        """Sending a command when not connected raises ConnectionError."""
        bridge = ChromeBridge(port=0)
        with pytest.raises(ConnectionError, match="not connected"):
            await bridge.search("git")

    @pytest.mark.asyncio
    async def test_send_command_with_mock_ws(self):
        """Commands are sent as JSON and responses are parsed."""
        bridge = ChromeBridge(port=0)

        mock_ws = AsyncMock()
        bridge._ws = mock_ws
        bridge._connected = True
        sent = []

        async def fake_send(data):
            msg = json.loads(data)
            sent.append(msg)
            bridge._pending[msg["id"]].set_result({
                "id": msg["id"],
                "status": "ok",
                "result": [{"id": "42", "title": "GitHub", "url": "https://github.com"}],
            })

        mock_ws.send = fake_send

        result = await bridge.search("git")
        assert result[0]["id"] == "42"
        assert sent[0]["action"] == "search"
        assert sent[0]["params"] == {"query": "git"}
        assert bridge._pending == {}

    @pytest.mark.asyncio
    async def test_send_command_error_response_raises(self):
        """Extension error responses raise RuntimeError."""
        bridge = ChromeBridge(port=0)

        mock_ws = AsyncMock()
        bridge._ws = mock_ws
        bridge._connected = True

        async def fake_send(data):
            msg = json.loads(data)
            bridge._pending[msg["id"]].set_result({
                "id": msg["id"],
                "status": "error",
                "error": "Can't find bookmark for id.",
            })

        mock_ws.send = fake_send

        with pytest.raises(RuntimeError, match="Can't find bookmark"):
            await bridge.get_children("999")

    @pytest.mark.asyncio
    async def test_send_command_timeout(self):
        """Commands that don't get a response time out."""
        bridge = ChromeBridge(port=0)

        mock_ws = AsyncMock()
        bridge._ws = mock_ws
        bridge._connected = True

        # send does nothing, so the future never resolves
        mock_ws.send = AsyncMock()

        import quickmarks.chrome_bridge as bridge_module
        original_timeout = bridge_module.RESPONSE_TIMEOUT
        bridge_module.RESPONSE_TIMEOUT = 0.1

        try:
            with pytest.raises(TimeoutError):
                await bridge.open_tab("https://example.com")
        finally:
            bridge_module.RESPONSE_TIMEOUT = original_timeout


class TestBridgeHighLevelMethods:
    """Test that high-level methods send the right actions."""

    @pytest.mark.asyncio
    async def test_get_children_sends_getChildren(self):
        bridge = ChromeBridge(port=0)
        bridge._send_command = AsyncMock(return_value=[])
        await bridge.get_children("2")
        bridge._send_command.assert_called_once_with("getChildren", {"id": "2"})

    @pytest.mark.asyncio
    async def test_get_recent_sends_getRecent(self):
        bridge = ChromeBridge(port=0)
        bridge._send_command = AsyncMock(return_value=[])
        await bridge.get_recent(10)
        bridge._send_command.assert_called_once_with("getRecent", {"count": 10})

    @pytest.mark.asyncio
    async def test_open_tab_sends_openTab(self):
        bridge = ChromeBridge(port=0)
        bridge._send_command = AsyncMock(return_value={})
        await bridge.open_tab("https://x.com")
        bridge._send_command.assert_called_once_with("openTab", {"url": "https://x.com"})

    @pytest.mark.asyncio
    async def test_close_popup_sends_closePopup(self):
        bridge = ChromeBridge(port=0)
        bridge._send_command = AsyncMock(return_value={})
        await bridge.close_popup()
        bridge._send_command.assert_called_once_with("closePopup", {})

    @pytest.mark.asyncio
    async def test_open_popup_window_centres_popup(self):
        bridge = ChromeBridge(port=0)
        bridge._send_command = AsyncMock(side_effect=[
            {"left": 0, "top": 0, "width": 1400, "height": 1000},
            {"id": 7},
        ])
        result = await bridge.open_popup_window(400, 500)
        assert result == {"id": 7}
        bridge._send_command.assert_called_with("createWindow", {
            "url": "popup.html",
            "type": "popup",
            "focused": True,
            "left": 500,
            "top": 250,
            "width": 400,
            "height": 500,
        })
