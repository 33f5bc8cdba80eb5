"""Shared fetch rate limiter using aiolimiter.

The concurrency bound caps how many pages are in flight; this limiter caps how
fast new requests start, so a burst of fast failures cannot hammer the host.
"""

import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from aiolimiter import AsyncLimiter

from rssfinder.core.metrics import rate_limiter_throttled_total

T = TypeVar("T")


def build_fetch_limiter(max_rate: float) -> AsyncLimiter:
    """Token bucket allowing ``max_rate`` request starts per second."""
    return AsyncLimiter(max_rate=max_rate, time_period=1.0)


async def rate_limited_call(
    limiter: AsyncLimiter,
    func: Callable[..., Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Execute function once a limiter token is available.

    Counts calls that had to wait more than 10ms for a token.
    """
    start = time.monotonic()
    async with limiter:
        if time.monotonic() - start > 0.01:
            rate_limiter_throttled_total.inc()
        return await func(*args, **kwargs)
