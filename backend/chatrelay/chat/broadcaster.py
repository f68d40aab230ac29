from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Optional

from chatrelay.chat import transport
from chatrelay.chat.envelopes import OutgoingMessage
from chatrelay.chat.registry import SessionRegistry
from chatrelay.logging.ndjson import log_event


@dataclass
class BroadcastResult:
    delivered: int = 0
    failed: int = 0
    skipped: int = 0


def excluding(conn: Optional[Any]) -> Callable[[Any], bool]:
    """Recipient filter: everyone, or everyone but ``conn``."""
    if conn is None:
        return lambda _c: True
    return lambda c: c != conn


class Broadcaster:
    """Fan-out of one message to a filtered registry snapshot."""

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    async def send_to(self, conn: Any, message: OutgoingMessage) -> bool:
        return await transport.send(conn, message.to_text())

    async def broadcast(self, message: OutgoingMessage, exclude: Optional[Any] = None) -> BroadcastResult:
        """
        Send ``message`` to every registered, still-open connection except ``exclude``.

        Sends run concurrently outside the registry lock. A failed recipient is logged by
        the transport and skipped; it stays registered until its close notification.
        """
        snapshot = await self.registry.snapshot()
        keep = excluding(exclude)
        result = BroadcastResult()
        targets = []
        for conn, _name in snapshot:
            if not keep(conn):
                continue
            if not transport.is_open(conn):
                result.skipped += 1
                continue
            targets.append(conn)

        if targets:
            text = message.to_text()
            outcomes = await asyncio.gather(*[transport.send(c, text) for c in targets])
            result.delivered = sum(1 for ok in outcomes if ok)
            result.failed = len(outcomes) - result.delivered

        if result.failed:
            log_event(
                level="warn",
                event="chat.broadcast_partial",
                data={"type": message.type, "delivered": result.delivered, "failed": result.failed},
            )
        return result
