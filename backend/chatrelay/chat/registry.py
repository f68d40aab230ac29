from __future__ import annotations

import asyncio
from typing import Hashable, Optional


class SessionRegistry:
    """
    Live connections and their display names.

    Names are ``"User<N>"`` with N counting up from 1 per successful join and never
    reused. All reads and writes happen under one lock so a snapshot never sees a
    connection without its name. Unknown connections are never an error.
    """

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self._names: dict[Hashable, str] = {}
        self._next_id = 1

    async def join(self, conn: Hashable) -> str:
        async with self.lock:
            existing = self._names.get(conn)
            if existing is not None:
                return existing
            name = f"User{self._next_id}"
            self._next_id += 1
            self._names[conn] = name
            return name

    async def leave(self, conn: Hashable) -> Optional[str]:
        """Remove ``conn``; returns the name it had, or None if it was not registered."""
        async with self.lock:
            return self._names.pop(conn, None)

    async def name_of(self, conn: Hashable) -> Optional[str]:
        async with self.lock:
            return self._names.get(conn)

    async def snapshot(self) -> list[tuple[Hashable, str]]:
        """Point-in-time (connection, name) pairs in join order."""
        async with self.lock:
            return list(self._names.items())

    async def names(self) -> list[str]:
        async with self.lock:
            return list(self._names.values())

    async def count(self) -> int:
        async with self.lock:
            return len(self._names)
