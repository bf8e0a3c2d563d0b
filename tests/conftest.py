"""Pytest configuration and shared fixtures."""

from typing import Optional

import pytest

from jinoca.abilities.image_gen import GeneratedImage
from jinoca.transport.base import (
    HistoryMessage,
    InboundMessage,
    Presence,
    Transport,
    TransportError,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeTransport(Transport):
    """Records every outbound call instead of talking to WhatsApp."""

    def __init__(self, history: Optional[list[HistoryMessage]] = None):
        self.sent: list[tuple] = []
        self.presence: list[tuple[str, Presence]] = []
        self.history = history or []
        self.history_requests: list[tuple[str, int]] = []
        self.fail_send_text = False
        self.fail_history = False
        self.started = 0
        self.stopped = 0

    async def start(self):
        self.started += 1

    async def stop(self):
        self.stopped += 1

    async def messages(self):
        for _ in ():
            yield _

    async def events(self):
        for _ in ():
            yield _

    async def send_text(self, chat_id, text, quoted_id=None):
        if self.fail_send_text:
            raise TransportError("send failed")
        self.sent.append(("text", chat_id, text))

    async def send_image(self, chat_id, image, caption="", quoted_id=None):
        self.sent.append(("image", chat_id, caption, image.data))

    async def set_presence(self, chat_id, presence):
        self.presence.append((chat_id, presence))

    async def fetch_history(self, chat_id, limit):
        self.history_requests.append((chat_id, limit))
        if self.fail_history:
            raise TransportError("history unavailable")
        return self.history[-limit:]

    @property
    def texts(self) -> list[str]:
        return [s[2] for s in self.sent if s[0] == "text"]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_message():
    """Factory for inbound DMs (override any field by keyword)."""
    def _make(body: str = "oi", chat_id: str = "5511999990000@c.us", **kwargs) -> InboundMessage:
        fields = dict(
            id="MSG1",
            sender_id=chat_id,
            chat_id=chat_id,
            body=body,
            is_from_self=False,
            timestamp=1700000000.0,
        )
        fields.update(kwargs)
        return InboundMessage.from_jids(**fields)
    return _make


@pytest.fixture
def png_image():
    return GeneratedImage(data=PNG_BYTES)
