"""Conversation context: persona prompt + recent chat turns + current message."""

import logging
from typing import Sequence

from .llm.provider import ChatMessage
from .persona import SYSTEM_PROMPT
from .transport.base import HistoryMessage, InboundMessage, Transport

logger = logging.getLogger("jinoca.context")


def build_context(
    message: InboundMessage,
    history: Sequence[HistoryMessage] = (),
    limit: int = 10,
    system_prompt: str = SYSTEM_PROMPT,
) -> list[ChatMessage]:
    """Assemble the message list for one completion request.

    Layout:
    1. One system turn (persona prompt)
    2. Up to `limit` prior turns, oldest first; the bot's own messages
       become `assistant`, everything else `user`
    3. The current message as the final `user` turn

    History entries with no text and the current message itself (matched
    by id) are dropped before the window is cut.
    """
    messages = [ChatMessage(role="system", content=system_prompt)]

    if limit > 0 and history:
        prior = [
            h for h in history
            if h.id != message.id and (h.body or "").strip()
        ]
        for h in prior[-limit:]:
            role = "assistant" if h.from_me else "user"
            messages.append(ChatMessage(role=role, content=h.body))

    messages.append(ChatMessage(role="user", content=message.body or ""))
    return messages


class ContextBuilder:
    """Fetches chat history from the transport and builds the context."""

    def __init__(self, transport: Transport, history_limit: int = 10,
                 system_prompt: str = SYSTEM_PROMPT):
        self.transport = transport
        self.history_limit = max(0, history_limit)
        self.system_prompt = system_prompt

    async def _fetch_history(self, message: InboundMessage) -> list[HistoryMessage]:
        if self.history_limit == 0:
            return []
        # +1: the history source usually already contains the current message
        try:
            return await self.transport.fetch_history(message.chat_id, self.history_limit + 1)
        except Exception as e:
            logger.warning(f"History fetch failed for {message.chat_id}, continuing without it: {e}")
            return []

    async def build(self, message: InboundMessage) -> list[ChatMessage]:
        history = await self._fetch_history(message)
        messages = build_context(message, history, self.history_limit, self.system_prompt)
        logger.debug(f"Context for {message.chat_id}: {len(messages)} turns ({len(history)} fetched)")
        return messages
