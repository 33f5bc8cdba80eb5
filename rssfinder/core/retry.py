"""Retry utilities with exponential backoff for page fetches.

Retries transient failures (network errors, timeouts, 5xx, 429) with a delay
that doubles after each attempt. Anything else (a malformed URL, an unsupported
scheme, a 404) is re-raised at once. Unlike a best-effort tool call, a page fetch
must be able to explain itself, so the last error is re-raised on exhaustion and
ends up in the failure report's cause chain.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


def is_retryable_status(status_code: int) -> bool:
    """5xx and 429 Too Many Requests; every other 4xx is permanent."""
    return status_code >= 500 or status_code == 429


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    **kwargs: Any,
) -> T:
    """Retry async function with exponential backoff on transient failure.

    Args:
        func: Async function to retry
        *args: Positional arguments for func
        max_attempts: Maximum attempts including the first one (default 3)
        base_delay: Initial retry delay in seconds (default 1.0)
        max_delay: Maximum retry delay in seconds (default 10.0)
        **kwargs: Keyword arguments for func

    Returns:
        Result from the first successful func call

    Raises:
        The first permanent error, or the error of the last attempt.
    """
    name = getattr(func, "__name__", repr(func))
    attempt = 0
    while True:
        try:
            return await func(*args, **kwargs)
        except httpx.HTTPStatusError as e:
            attempt += 1
            status_code = e.response.status_code
            if not is_retryable_status(status_code):
                logger.warning(
                    "retry.non_retryable_http_error",
                    func=name,
                    status_code=status_code,
                    error=str(e),
                )
                raise
            if attempt >= max_attempts:
                logger.warning(
                    "retry.exhausted",
                    func=name,
                    attempts=attempt,
                    status_code=status_code,
                    error=str(e),
                )
                raise
            delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
            logger.info(
                "retry.attempt",
                func=name,
                attempt=attempt,
                max_attempts=max_attempts,
                delay_seconds=delay,
                status_code=status_code,
            )
            await asyncio.sleep(delay)
        except _TRANSIENT_ERRORS as e:
            attempt += 1
            if attempt >= max_attempts:
                logger.warning(
                    "retry.exhausted",
                    func=name,
                    attempts=attempt,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise
            delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
            logger.info(
                "retry.attempt",
                func=name,
                attempt=attempt,
                max_attempts=max_attempts,
                delay_seconds=delay,
                error_type=type(e).__name__,
            )
            await asyncio.sleep(delay)
