"""Retrieve channel pages over HTTP.

``HttpFetcher`` never raises: every transport, status or decoding problem is
returned as a failed ``FetchOutcome`` carrying the original exception.
"""

from __future__ import annotations

import time

import httpx
import structlog

from rssfinder.core.config import settings
from rssfinder.core.metrics import page_fetch_duration_seconds, page_fetches_total
from rssfinder.core.rate_limiter import build_fetch_limiter, rate_limited_call
from rssfinder.core.retry import retry_with_backoff
from rssfinder.services.types import FetchOutcome

logger = structlog.get_logger(__name__)


def _default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.FETCH_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml",
        "Accept-Language": settings.FETCH_ACCEPT_LANGUAGE,
    }


class HttpFetcher:
    """Fetcher backed by one shared ``httpx.AsyncClient``.

    Use as an async context manager so the connection pool is closed::

        async with HttpFetcher() as fetcher:
            outcome = await fetcher.fetch("https://www.youtube.com/@example")
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
        rate_limit: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.FETCH_TIMEOUT,
            follow_redirects=True,
            headers=_default_headers(),
        )
        self._max_attempts = settings.FETCH_MAX_ATTEMPTS if max_attempts is None else max_attempts
        if self._max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._base_delay = settings.FETCH_RETRY_BASE_DELAY if base_delay is None else base_delay
        self._max_delay = settings.FETCH_RETRY_MAX_DELAY if max_delay is None else max_delay
        rate = settings.FETCH_RATE_LIMIT if rate_limit is None else rate_limit
        if rate <= 0:
            raise ValueError("rate_limit must be > 0")
        self._limiter = build_fetch_limiter(rate)

    async def __aenter__(self) -> HttpFetcher:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_text(self, url: str) -> str:
        response = await self._client.get(url)
        response.raise_for_status()
        # Decoding is part of the fetch: a body that cannot be read is a fetch failure.
        return response.text

    async def fetch(self, identifier: str) -> FetchOutcome:
        start_time = time.perf_counter()
        try:
            text = await retry_with_backoff(
                rate_limited_call,
                self._limiter,
                self._get_text,
                identifier,
                max_attempts=self._max_attempts,
                base_delay=self._base_delay,
                max_delay=self._max_delay,
            )
        except httpx.HTTPStatusError as exc:
            page_fetches_total.labels(status="failed").inc()
            logger.warning(
                "fetcher.http_error",
                identifier=identifier,
                status_code=exc.response.status_code,
            )
            return FetchOutcome.failed(identifier, exc)
        except httpx.TimeoutException as exc:
            page_fetches_total.labels(status="failed").inc()
            logger.warning("fetcher.timeout", identifier=identifier, timeout=settings.FETCH_TIMEOUT)
            return FetchOutcome.failed(identifier, exc)
        except Exception as exc:
            page_fetches_total.labels(status="failed").inc()
            logger.warning(
                "fetcher.request_failed",
                identifier=identifier,
                error_type=type(exc).__name__,
                error=str(exc)[:200],
            )
            return FetchOutcome.failed(identifier, exc)
        finally:
            page_fetch_duration_seconds.observe(time.perf_counter() - start_time)

        page_fetches_total.labels(status="content").inc()
        logger.debug("fetcher.fetched", identifier=identifier, chars=len(text))
        return FetchOutcome.content(identifier, text)
