"""Intent classification: decide which handler an inbound body goes to."""

from dataclasses import dataclass
from enum import Enum

IMAGE_PREFIX = "image "


class Intent(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    IMAGE_MISSING_PROMPT = "image_missing_prompt"


@dataclass(frozen=True)
class Route:
    """Classification result.

    `payload` is the text the chosen handler works on: the full original
    body for TEXT, the trimmed prompt for IMAGE, empty otherwise.
    """
    intent: Intent
    payload: str


def classify(body: str) -> Route:
    """Classify a message body.

    Matching is done on a case-folded copy with leading whitespace removed.
    The prompt handed to the image handler keeps the user's original casing;
    only the `image ` prefix is consumed.
    """
    body = body or ""
    stripped = body.lstrip()
    if stripped[:len(IMAGE_PREFIX)].casefold() != IMAGE_PREFIX:
        return Route(Intent.TEXT, body)

    prompt = stripped[len(IMAGE_PREFIX):].strip()
    if not prompt:
        return Route(Intent.IMAGE_MISSING_PROMPT, "")
    return Route(Intent.IMAGE, prompt)
