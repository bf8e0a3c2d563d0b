"""Tests for the completion and image dispatchers."""

from unittest.mock import AsyncMock

import pytest

from jinoca import persona
from jinoca.abilities.image_gen import GeneratedImage
from jinoca.context import ContextBuilder
from jinoca.dispatch import CompletionDispatcher, ImageDispatcher
from jinoca.llm.provider import CompletionError, ImageGenError


class TestCompletionDispatcher:

    def _dispatcher(self, transport, client):
        return CompletionDispatcher(transport, ContextBuilder(transport, history_limit=0), client)

    @pytest.mark.asyncio
    async def test_sends_model_reply(self, transport, make_message):
        client = AsyncMock()
        client.complete.return_value = "Oi! 😏"

        reply = await self._dispatcher(transport, client).handle(make_message("oi"))

        assert reply == "Oi! 😏"
        assert transport.sent == [("text", "5511999990000@c.us", "Oi! 😏")]
        client.complete.assert_awaited_once()
        messages = client.complete.await_args.args[0]
        assert [m.role for m in messages] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_failure_sends_fallback(self, transport, make_message):
        client = AsyncMock()
        client.complete.side_effect = CompletionError("API error (500)", status_code=500)

        reply = await self._dispatcher(transport, client).handle(make_message("oi"))

        assert reply == persona.COMPLETION_FALLBACK
        assert transport.texts == [persona.COMPLETION_FALLBACK]
        assert client.complete.await_count == 1


class TestImageDispatcher:

    @pytest.mark.asyncio
    async def test_ack_then_image(self, transport, make_message, png_image):
        generator = AsyncMock()
        generator.generate.return_value = png_image

        delivered = await ImageDispatcher(transport, generator).handle(make_message("image gato"), "gato")

        assert delivered is True
        generator.generate.assert_awaited_once_with("gato")
        assert transport.sent == [
            ("text", "5511999990000@c.us", persona.IMAGE_ACK),
            ("image", "5511999990000@c.us", persona.IMAGE_CAPTION, png_image.data),
        ]

    @pytest.mark.asyncio
    async def test_ack_then_fallback(self, transport, make_message):
        generator = AsyncMock()
        generator.generate.side_effect = ImageGenError("API error (502)")

        delivered = await ImageDispatcher(transport, generator).handle(make_message("image gato"), "gato")

        assert delivered is False
        assert transport.texts == [persona.IMAGE_ACK, persona.IMAGE_FALLBACK]
        assert not any(s[0] == "image" for s in transport.sent)

    @pytest.mark.asyncio
    async def test_request_prompt(self, transport, make_message):
        generator = AsyncMock()

        await ImageDispatcher(transport, generator).request_prompt(make_message("image "))

        assert transport.texts == [persona.IMAGE_PROMPT_REQUEST]
        generator.generate.assert_not_awaited()
