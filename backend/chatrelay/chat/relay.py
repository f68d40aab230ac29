from __future__ import annotations

from typing import Any, Optional, Union

from chatrelay.chat import envelopes
from chatrelay.chat.broadcaster import Broadcaster
from chatrelay.chat.envelopes import EnvelopeError, IncomingChat
from chatrelay.chat.registry import SessionRegistry
from chatrelay.chat.transport import connection_id
from chatrelay.logging.ndjson import log_event


class ChatRelay:
    """
    Connect / message / disconnect handling for the single chat room.

    The transport calls these three entry points; everything a client observes
    (welcome, presence notices, user lists, relayed chat) is produced here.
    """

    def __init__(self, registry: Optional[SessionRegistry] = None) -> None:
        self.registry = registry or SessionRegistry()
        self.broadcaster = Broadcaster(self.registry)

    async def _broadcast_userlist(self) -> None:
        users = await self.registry.names()
        await self.broadcaster.broadcast(envelopes.userlist_message(users))

    async def on_connect(self, conn: Any) -> str:
        name = await self.registry.join(conn)
        log_event(level="info", event="chat.join", connectionId=connection_id(conn), data={"name": name})

        # Welcome first, so the new client sees it before any user list.
        await self.broadcaster.send_to(conn, envelopes.welcome_message(name))
        await self.broadcaster.broadcast(envelopes.joined_message(name), exclude=conn)
        await self._broadcast_userlist()
        return name

    async def on_message(self, conn: Any, raw: Union[str, bytes]) -> bool:
        """Relay a chat payload to everyone else. Returns True if a broadcast happened."""
        cid = connection_id(conn)
        try:
            env = envelopes.parse_incoming(raw)
        except EnvelopeError as e:
            log_event(level="warn", event="chat.parse_error", connectionId=cid, data={"error": str(e)})
            return False

        if not isinstance(env, IncomingChat):
            log_event(level="debug", event="chat.ignored", connectionId=cid, data={"type": env.type})
            return False

        sender = await self.registry.name_of(conn)
        msg = envelopes.chat_message(sender, env.content)
        result = await self.broadcaster.broadcast(msg, exclude=conn)
        log_event(
            level="info",
            event="chat.message",
            connectionId=cid,
            data={"sender": sender, "contentLen": len(env.content), "delivered": result.delivered},
        )
        return True

    async def on_disconnect(self, conn: Any) -> Optional[str]:
        """Safe to call repeatedly; only the first call for a joined connection notifies."""
        name = await self.registry.name_of(conn)
        if name is None:
            return None
        if await self.registry.leave(conn) is None:
            # A concurrent disconnect got there first.
            return None

        log_event(level="info", event="chat.leave", connectionId=connection_id(conn), data={"name": name})
        await self.broadcaster.broadcast(envelopes.left_message(name))
        await self._broadcast_userlist()
        return name
