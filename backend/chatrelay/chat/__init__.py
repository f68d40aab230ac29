from chatrelay.chat.broadcaster import Broadcaster, BroadcastResult
from chatrelay.chat.registry import SessionRegistry
from chatrelay.chat.relay import ChatRelay

__all__ = ["Broadcaster", "BroadcastResult", "ChatRelay", "SessionRegistry"]
