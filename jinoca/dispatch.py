"""Reply dispatchers, one per intent.

Remote API failures are recovered here (fallback reply); transport
failures propagate to the orchestrator.
"""

import logging

from . import persona
from .abilities.image_gen import ImageGenerator
from .communication.errors import call_or_fallback
from .context import ContextBuilder
from .llm.openrouter import OpenRouterClient
from .transport.base import InboundMessage, Transport

logger = logging.getLogger("jinoca.dispatch")


class CompletionDispatcher:
    """Text replies: build context, one completion call, send the answer."""

    def __init__(self, transport: Transport, context: ContextBuilder, client: OpenRouterClient):
        self.transport = transport
        self.context = context
        self.client = client

    async def handle(self, message: InboundMessage) -> str:
        messages = await self.context.build(message)
        reply = await call_or_fallback(
            lambda: self.client.complete(messages),
            persona.COMPLETION_FALLBACK,
            label="Completion API",
        )
        await self.transport.send_text(message.chat_id, reply, quoted_id=message.id)
        logger.info(f"[{message.chat_id}] replied: {reply[:80]}")
        return reply


class ImageDispatcher:
    """Image replies: acknowledge, generate, send the picture (or apologise)."""

    def __init__(self, transport: Transport, generator: ImageGenerator):
        self.transport = transport
        self.generator = generator

    async def request_prompt(self, message: InboundMessage) -> None:
        """`image` with nothing after it: ask what to draw, call nothing."""
        await self.transport.send_text(message.chat_id, persona.IMAGE_PROMPT_REQUEST, quoted_id=message.id)

    async def handle(self, message: InboundMessage, prompt: str) -> bool:
        """Returns True if an image was delivered."""
        await self.transport.send_text(message.chat_id, persona.IMAGE_ACK, quoted_id=message.id)

        image = await call_or_fallback(
            lambda: self.generator.generate(prompt),
            None,
            label="Image API",
        )
        if image is None:
            await self.transport.send_text(message.chat_id, persona.IMAGE_FALLBACK, quoted_id=message.id)
            return False

        await self.transport.send_image(
            message.chat_id, image, caption=persona.IMAGE_CAPTION, quoted_id=message.id,
        )
        logger.info(f"[{message.chat_id}] sent image ({len(image.data)} bytes) for: {prompt[:60]}")
        return True
