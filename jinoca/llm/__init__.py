"""Remote model clients."""

from .provider import ChatMessage, RemoteAPIError, CompletionError, ImageGenError
from .openrouter import OpenRouterClient

__all__ = [
    "ChatMessage",
    "RemoteAPIError",
    "CompletionError",
    "ImageGenError",
    "OpenRouterClient",
]
