"""Shared types for the remote completion and image APIs."""

from dataclasses import dataclass
from typing import Optional


# ════════════════════════════════════════════════════════
# Remote API exception hierarchy. Clients raise these,
# communication.errors turns them into fallback replies.
# ════════════════════════════════════════════════════════

class RemoteAPIError(Exception):
    """Base class for outbound API failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CompletionError(RemoteAPIError):
    """Chat-completion call failed (network, HTTP status, payload shape)."""
    pass


class ImageGenError(RemoteAPIError):
    """Image generation call failed or returned no usable image."""
    pass


@dataclass(frozen=True)
class ChatMessage:
    role: str           # 'system', 'user', 'assistant'
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}
