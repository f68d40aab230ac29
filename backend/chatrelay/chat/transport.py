from __future__ import annotations

from typing import Any, Protocol

from starlette.websockets import WebSocketState

from chatrelay.logging.ndjson import log_event


class Connection(Protocol):
    """What the relay needs from a client connection. Starlette's WebSocket fits."""

    async def send_text(self, data: str) -> None: ...


def connection_id(conn: Any) -> str:
    return f"{id(conn):x}"


def is_open(conn: Any) -> bool:
    for attr in ("client_state", "application_state"):
        if getattr(conn, attr, None) == WebSocketState.DISCONNECTED:
            return False
    return True


async def send(conn: Connection, text: str) -> bool:
    """
    Deliver one text frame. Failures are logged and reported as False, never raised.
    """
    try:
        await conn.send_text(text)
        return True
    except Exception as e:  # noqa: BLE001
        log_event(
            level="warn",
            event="chat.send_error",
            connectionId=connection_id(conn),
            data={"error": str(e), "errorType": type(e).__name__},
        )
        return False
