"""Per-message pipeline: filter → typing → route → reply → typing cleared."""

import logging
from enum import Enum
from typing import Optional

from . import persona
from .dispatch import CompletionDispatcher, ImageDispatcher
from .intent import Intent, classify
from .transport.base import InboundMessage, Presence, Transport

logger = logging.getLogger("jinoca.orchestrator")


class Disposition(str, Enum):
    FILTERED = "filtered"
    REPLIED = "replied"
    APOLOGIZED = "apologized"


def skip_reason(message: InboundMessage) -> Optional[str]:
    """Why a message is ignored, or None if it should be answered."""
    if message.is_from_self:
        return "from self"
    if message.is_status_broadcast:
        return "status broadcast"
    if message.is_group_chat or message.chat_id.endswith("@g.us"):
        return "group chat"
    return None


class _PresenceGuard:
    """Shows 'composing' while the body runs; always resets to 'available'.

    Usage:
        async with _PresenceGuard(transport, chat_id):
            await handler()
    """

    def __init__(self, transport: Transport, chat_id: str):
        self._transport = transport
        self._chat_id = chat_id

    async def __aenter__(self):
        try:
            await self._transport.set_presence(self._chat_id, Presence.COMPOSING)
        except Exception as e:
            logger.warning(f"[{self._chat_id}] could not set composing presence: {e}")
        return self

    async def __aexit__(self, *exc):
        try:
            await self._transport.set_presence(self._chat_id, Presence.AVAILABLE)
        except Exception as e:
            logger.error(f"[{self._chat_id}] could not clear composing presence: {e}")
        return False


class Orchestrator:
    """Routes each inbound message to a dispatcher.

    Messages are handled one at a time. Whatever a handler raises is
    logged and answered with the fixed apology; nothing escapes handle().
    """

    def __init__(
        self,
        transport: Transport,
        completions: CompletionDispatcher,
        images: ImageDispatcher,
    ):
        self.transport = transport
        self.completions = completions
        self.images = images

    async def handle(self, message: InboundMessage) -> Disposition:
        reason = skip_reason(message)
        if reason:
            logger.debug(f"[{message.chat_id}] skip: {reason}")
            return Disposition.FILTERED

        logger.info(f"[{message.chat_id}] {message.sender_id}: {message.body[:100]}")

        async with _PresenceGuard(self.transport, message.chat_id):
            try:
                await self._route(message)
                return Disposition.REPLIED
            except Exception as e:
                logger.error(f"Error processing message from {message.chat_id}: {e}", exc_info=True)
                await self._apologize(message)
                return Disposition.APOLOGIZED

    async def _route(self, message: InboundMessage) -> None:
        route = classify(message.body)
        if route.intent is Intent.IMAGE:
            await self.images.handle(message, route.payload)
        elif route.intent is Intent.IMAGE_MISSING_PROMPT:
            await self.images.request_prompt(message)
        else:
            await self.completions.handle(message)

    async def _apologize(self, message: InboundMessage) -> None:
        try:
            await self.transport.send_text(message.chat_id, persona.APOLOGY, quoted_id=message.id)
        except Exception as e:
            logger.error(f"[{message.chat_id}] apology could not be delivered: {e}")

    async def serve(self) -> None:
        """Consume the transport's message stream until it ends."""
        async for message in self.transport.messages():
            await self.handle(message)
