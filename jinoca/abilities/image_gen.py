"""Image Generation Ability: text-to-image via a prompt-in-path GET endpoint."""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from ..llm.provider import ImageGenError

logger = logging.getLogger("jinoca.image_gen")

_PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@dataclass(frozen=True)
class GeneratedImage:
    data: bytes
    mime_type: str = "image/png"


class ImageGenerator:
    """Generate images from text prompts.

    The endpoint takes the URL-encoded prompt as the last path segment and
    answers with raw image bytes, no JSON envelope. Images are kept in
    memory only.
    """

    def __init__(
        self,
        base_url: str = "https://imgen.duck.mom/prompt/",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self._transport = transport

    def build_url(self, prompt: str) -> str:
        return f"{self.base_url}{quote(prompt, safe='')}"

    async def generate(self, prompt: str) -> GeneratedImage:
        """Generate an image for `prompt`.

        Raises:
            ImageGenError: on network errors, non-2xx status, or a body that
                is empty or not a PNG.
        """
        prompt = (prompt or "").strip()
        if not prompt:
            raise ImageGenError("Prompt is required")

        url = self.build_url(prompt)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            raise ImageGenError(f"Request timed out ({self.timeout:.0f}s)") from e
        except httpx.HTTPError as e:
            raise ImageGenError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise ImageGenError(
                f"API error ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )

        image_bytes = response.content
        if not image_bytes:
            raise ImageGenError("Empty image payload")
        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if image_bytes.startswith(_PNG_MAGIC):
            mime_type = "image/png"
        elif content_type.startswith("image/"):
            mime_type = content_type
        else:
            raise ImageGenError(f"Payload is not an image (content-type: {content_type or 'unknown'})")

        logger.info(f"Generated image: {len(image_bytes)} bytes ({mime_type}) for prompt {prompt[:60]!r}")
        return GeneratedImage(data=image_bytes, mime_type=mime_type)
