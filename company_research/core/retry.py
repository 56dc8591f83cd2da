"""Async retry with exponential backoff for transient HTTP failures."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
)


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, RETRYABLE_EXCEPTIONS)


async def async_retry(
    fn: Callable[..., Awaitable[T]],
    *args,
    max_retries: int = 3,
    delay_base: float = 1.0,
    operation_name: str = "",
    **kwargs,
) -> T:
    """Await ``fn(*args, **kwargs)``, retrying rate limits, 5xx and timeouts.

    Permanent errors (4xx other than 429, anything non-HTTP) are raised
    immediately. The delay doubles each attempt: 1s, 2s, 4s, ...
    After ``max_retries`` retries the last exception is re-raised.
    """
    label = operation_name or getattr(fn, "__name__", "call")

    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)
        except Exception as exc:
            if not is_retryable(exc):
                raise
            reason = (
                f"HTTP {exc.response.status_code}"
                if isinstance(exc, httpx.HTTPStatusError)
                else type(exc).__name__
            )
            if attempt >= max_retries:
                logger.error(
                    "%s: %s, all %d attempts exhausted", label, reason, max_retries + 1
                )
                raise
            delay = delay_base * (2 ** attempt)
            logger.warning(
                "%s: %s on attempt %d/%d, retrying in %.1fs",
                label, reason, attempt + 1, max_retries + 1, delay,
            )
            await asyncio.sleep(delay)

    raise AssertionError("unreachable")
