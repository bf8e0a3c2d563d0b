"""OpenRouter chat-completion client (OpenAI-compatible wire format)."""

import logging
from typing import Optional

import httpx

from .provider import ChatMessage, CompletionError

logger = logging.getLogger("jinoca.llm.openrouter")


class OpenRouterClient:
    """Single-shot chat completions against OpenRouter.

    One POST per call, no streaming and no retries. Any failure is raised
    as CompletionError so callers only have one exception type to map.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        url: str = "https://openrouter.ai/api/v1/chat/completions",
        referer: str = "http://localhost:3000",
        title: str = "Jinoca Bot",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.referer = referer
        self.title = title
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

    async def complete(self, messages: list[ChatMessage]) -> str:
        """Send the conversation and return the first choice's text, trimmed."""
        if not self.api_key:
            raise CompletionError("OpenRouter API key not configured")

        body = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
        }
        logger.debug(f"Request: model={self.model}, messages={len(messages)}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=body, headers=self._get_headers())
                if resp.status_code >= 400:
                    raise CompletionError(
                        f"API error ({resp.status_code}): {resp.text[:200]}",
                        status_code=resp.status_code,
                    )
                data = resp.json()
        except httpx.TimeoutException as e:
            raise CompletionError(f"Request timed out ({self.timeout:.0f}s)") from e
        except httpx.HTTPError as e:
            raise CompletionError(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            # resp.json() on a non-JSON body
            raise CompletionError("Response is not JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise CompletionError(f"Unexpected response format: {str(data)[:200]}") from e

        if not isinstance(content, str):
            raise CompletionError("Completion content is not text")
        content = content.strip()
        if not content:
            raise CompletionError("Model returned an empty reply")
        return content
