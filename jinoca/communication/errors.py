"""Remote-call failure handling shared by both dispatchers."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

from ..llm.provider import RemoteAPIError

logger = logging.getLogger("jinoca.errors")

T = TypeVar("T")


def describe_error(e: BaseException) -> str:
    """Short, log-friendly description of a failure.

    Typed remote errors are described by their message; the wrapped httpx
    cause (if any) is named so timeouts and connect errors stand out.
    """
    if isinstance(e, RemoteAPIError):
        cause = e.__cause__
        if cause is not None:
            return f"{e} [{type(cause).__name__}]"
        return str(e)

    if isinstance(e, httpx.HTTPStatusError):
        return f"HTTP {e.response.status_code} from {e.request.url.host}"
    if isinstance(e, httpx.ConnectError):
        return "Cannot connect to remote API"
    if isinstance(e, (httpx.TimeoutException, asyncio.TimeoutError)):
        return "Request timed out"
    if isinstance(e, (KeyError, IndexError)):
        return f"Unexpected response format ({type(e).__name__}: {e})"

    return f"{type(e).__name__}: {e}"


async def call_or_fallback(call: Callable[[], Awaitable[T]], fallback: T, label: str) -> T:
    """Await `call()` once; on any failure log it and return `fallback`.

    No retry. Cancellation is not swallowed.
    """
    try:
        return await call()
    except Exception as e:
        logger.error(f"{label} failed: {describe_error(e)}")
        return fallback
