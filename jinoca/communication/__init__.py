"""Communication helpers shared by the dispatchers and the orchestrator."""

from .errors import call_or_fallback, describe_error

__all__ = ["call_or_fallback", "describe_error"]
