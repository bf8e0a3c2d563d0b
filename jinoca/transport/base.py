"""Messaging transport capability interface.

The orchestrator, dispatchers and status store only talk to a Transport;
each WhatsApp client library gets its own implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Optional, Union

from ..abilities.image_gen import GeneratedImage

STATUS_BROADCAST_JID = "status@broadcast"
GROUP_JID_SUFFIX = "@g.us"

# Disconnect reasons that mean the linked device was removed.
LOGOUT_REASONS = {"LOGOUT", "LOGGEDOUT", "LOGGED_OUT", "401", "AUTH_FAILURE"}


class TransportError(Exception):
    """A transport command could not be carried out."""
    pass


class Presence(str, Enum):
    COMPOSING = "composing"
    AVAILABLE = "available"


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender_id: str
    chat_id: str
    body: str
    is_from_self: bool = False
    is_status_broadcast: bool = False
    is_group_chat: bool = False
    timestamp: float = 0.0

    @classmethod
    def from_jids(
        cls,
        id: str,
        sender_id: str,
        chat_id: str,
        body: str,
        is_from_self: bool = False,
        timestamp: float = 0.0,
    ) -> "InboundMessage":
        """Build a message, deriving broadcast/group flags from JID conventions."""
        return cls(
            id=id,
            sender_id=sender_id,
            chat_id=chat_id,
            body=body or "",
            is_from_self=is_from_self,
            is_status_broadcast=STATUS_BROADCAST_JID in (chat_id, sender_id),
            is_group_chat=chat_id.endswith(GROUP_JID_SUFFIX),
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class HistoryMessage:
    """A previously exchanged message, as returned by fetch_history()."""
    id: str
    body: str
    from_me: bool
    timestamp: float = 0.0


class LifecycleKind(str, Enum):
    QR = "qr"
    OPEN = "open"
    CLOSE = "close"
    FAILED = "failed"


@dataclass(frozen=True)
class LifecycleEvent:
    kind: LifecycleKind
    qr: Optional[str] = None
    reason: Optional[str] = None
    logged_out: bool = False

    @classmethod
    def qr_challenge(cls, qr: str) -> "LifecycleEvent":
        return cls(LifecycleKind.QR, qr=qr)

    @classmethod
    def opened(cls) -> "LifecycleEvent":
        return cls(LifecycleKind.OPEN)

    @classmethod
    def closed(cls, reason: Union[str, int, None] = None) -> "LifecycleEvent":
        text = None if reason is None else str(reason)
        return cls(LifecycleKind.CLOSE, reason=text, logged_out=is_logout_reason(reason))

    @classmethod
    def failed(cls, reason: Optional[str] = None) -> "LifecycleEvent":
        """The client could not initialize; not recoverable by reconnecting."""
        return cls(LifecycleKind.FAILED, reason=reason)


def is_logout_reason(reason: Union[str, int, None]) -> bool:
    """True for disconnect reasons that require re-pairing (no reconnect)."""
    if reason is None:
        return False
    return str(reason).strip().upper() in LOGOUT_REASONS


class Transport(ABC):
    """What the bot needs from a WhatsApp client."""

    @abstractmethod
    async def start(self) -> None:
        """Connect. Raises on failure to launch."""

    @abstractmethod
    async def stop(self) -> None:
        ...

    async def restart(self) -> None:
        await self.stop()
        await self.start()

    @abstractmethod
    def messages(self) -> AsyncIterator[InboundMessage]:
        """Inbound messages, in arrival order."""

    @abstractmethod
    def events(self) -> AsyncIterator[LifecycleEvent]:
        """Connection lifecycle events."""

    @abstractmethod
    async def send_text(self, chat_id: str, text: str, quoted_id: Optional[str] = None) -> None:
        ...

    @abstractmethod
    async def send_image(
        self,
        chat_id: str,
        image: GeneratedImage,
        caption: str = "",
        quoted_id: Optional[str] = None,
    ) -> None:
        ...

    @abstractmethod
    async def set_presence(self, chat_id: str, presence: Presence) -> None:
        ...

    @abstractmethod
    async def fetch_history(self, chat_id: str, limit: int) -> list[HistoryMessage]:
        """Most recent messages in the chat, oldest first."""
