"""
Message envelopes exchanged over the chat websocket.

Outgoing envelopes are serialized as flat JSON objects:

- ``{"type": "system", "content": ...}``
- ``{"type": "chat", "sender": ..., "content": ..., "timestamp": <epoch ms>}``
- ``{"type": "userlist", "users": [...]}``

Incoming envelopes only need a string ``type``; ``chat`` additionally needs a string
``content``. Unknown fields are ignored.
"""

from __future__ import annotations

import json
import time
from typing import Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError


class EnvelopeError(ValueError):
    """Raised when an incoming payload is not a usable envelope."""


def now_ms() -> int:
    return int(time.time() * 1000)


class _Outgoing(BaseModel):
    def to_text(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":"))


class SystemMessage(_Outgoing):
    type: Literal["system"] = "system"
    content: str


class ChatMessage(_Outgoing):
    type: Literal["chat"] = "chat"
    sender: str
    content: str
    timestamp: int = Field(default_factory=now_ms)


class UserListMessage(_Outgoing):
    type: Literal["userlist"] = "userlist"
    users: list[str]


OutgoingMessage = Union[SystemMessage, ChatMessage, UserListMessage]


class IncomingEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: StrictStr


class IncomingChat(IncomingEnvelope):
    type: Literal["chat"]
    content: StrictStr


def system_message(content: str) -> SystemMessage:
    return SystemMessage(content=content)


def welcome_message(name: str) -> SystemMessage:
    return system_message(f"Welcome to the chat, {name}!")


def joined_message(name: str) -> SystemMessage:
    return system_message(f"{name} joined the chat")


def left_message(name: str) -> SystemMessage:
    return system_message(f"{name} left the chat")


def chat_message(sender: Optional[str], content: str, timestamp: Optional[int] = None) -> ChatMessage:
    # A sender can be missing if a message races with teardown.
    return ChatMessage(
        sender=sender or "",
        content=content,
        timestamp=now_ms() if timestamp is None else timestamp,
    )


def userlist_message(users: Iterable[str]) -> UserListMessage:
    return UserListMessage(users=list(users))


def parse_incoming(raw: Union[str, bytes]) -> Union[IncomingEnvelope, IncomingChat]:
    """
    Decode one client payload.

    Returns an ``IncomingChat`` for ``type == "chat"`` and a bare ``IncomingEnvelope``
    for any other type. Raises ``EnvelopeError`` for bad or too deeply nested JSON, a non-object payload,
    a missing/non-string ``type`` or a chat without a string ``content``.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        raise EnvelopeError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise EnvelopeError(f"expected a JSON object, got {type(data).__name__}")

    try:
        env = IncomingEnvelope.model_validate(data)
        if env.type == "chat":
            return IncomingChat.model_validate(data)
        return env
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors())
        raise EnvelopeError(f"invalid envelope ({fields})") from e
