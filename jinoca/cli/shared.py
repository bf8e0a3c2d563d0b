"""Shared utilities for Jinoca CLI commands."""

from rich.console import Console

console = Console()


def status_url(base: str) -> str:
    """Normalize a bot address to its /status endpoint."""
    base = base.strip().rstrip("/")
    if not base.startswith(("http://", "https://")):
        base = f"http://{base}"
    if not base.endswith("/status"):
        base = f"{base}/status"
    return base
