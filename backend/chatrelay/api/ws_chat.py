from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from chatrelay.chat.relay import ChatRelay
from chatrelay.chat.transport import connection_id
from chatrelay.logging.ndjson import log_event


router = APIRouter()


def get_relay(ws: WebSocket) -> ChatRelay:
    return ws.app.state.relay


@router.websocket("/chat")
async def ws_chat(ws: WebSocket) -> None:
    relay = get_relay(ws)
    cid = connection_id(ws)
    disconnect_code: int | None = None

    await ws.accept()
    log_event(
        level="info",
        event="ws.connect",
        connectionId=cid,
        data={
            "client": getattr(ws.client, "host", None),
            "headers": {
                "origin": ws.headers.get("origin"),
                "user_agent": ws.headers.get("user-agent"),
                "x_forwarded_for": ws.headers.get("x-forwarded-for"),
            },
        },
    )

    try:
        await relay.on_connect(ws)
        while True:
            try:
                raw = await ws.receive_text()
            except WebSocketDisconnect as e:
                disconnect_code = getattr(e, "code", None)
                raise
            except Exception as e:  # noqa: BLE001
                log_event(level="warn", event="ws.receive_error", connectionId=cid, data={"error": str(e)})
                try:
                    await ws.close(code=1003)
                except RuntimeError:
                    pass
                return
            await relay.on_message(ws, raw)

    except WebSocketDisconnect as e:
        disconnect_code = getattr(e, "code", None)
    finally:
        await relay.on_disconnect(ws)
        log_event(
            level="info",
            event="ws.disconnect",
            connectionId=cid,
            data={"code": disconnect_code, "client": getattr(ws.client, "host", None)},
        )
