"""Messaging transports."""

from .base import (
    HistoryMessage,
    InboundMessage,
    LifecycleEvent,
    LifecycleKind,
    Presence,
    Transport,
    TransportError,
    is_logout_reason,
)

__all__ = [
    "HistoryMessage",
    "InboundMessage",
    "LifecycleEvent",
    "LifecycleKind",
    "Presence",
    "Transport",
    "TransportError",
    "is_logout_reason",
]
