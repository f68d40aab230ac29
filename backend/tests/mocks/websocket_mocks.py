"""
Mock factory functions for chat connection testing.
"""

import json
from unittest.mock import AsyncMock, MagicMock

from fastapi import WebSocket
from starlette.websockets import WebSocketState


def create_mock_websocket(*, fail_send: bool = False):
    """
    Creates a mock WebSocket connection that records text frames.

    Args:
        fail_send: Make every send_text call raise ConnectionError.

    Returns:
        MagicMock: Mocked WebSocket instance
    """
    ws_mock = MagicMock(spec=WebSocket)
    if fail_send:
        ws_mock.send_text = AsyncMock(side_effect=ConnectionError("peer gone"))
    else:
        ws_mock.send_text = AsyncMock()
    ws_mock.accept = AsyncMock()
    ws_mock.close = AsyncMock()
    ws_mock.client_state = WebSocketState.CONNECTED
    ws_mock.application_state = WebSocketState.CONNECTED
    return ws_mock


def sent_messages(ws_mock):
    """Decode every text frame sent to ``ws_mock`` in order."""
    return [json.loads(call.args[0]) for call in ws_mock.send_text.call_args_list]
