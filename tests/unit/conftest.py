"""Shared fixtures for rssfinder unit tests."""

import asyncio

import pytest
import structlog

from rssfinder.services.types import FetchOutcome


class StaticFetcher:
    """In-memory fetcher: maps identifiers to page text or to an exception.

    Tracks every call and the peak number of concurrent fetches.
    """

    def __init__(
        self,
        pages: dict[str, str | BaseException],
        delays: dict[str, float] | None = None,
    ) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def fetch(self, identifier: str) -> FetchOutcome:
        self.calls.append(identifier)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(identifier, 0))
            page = self.pages[identifier]
            if isinstance(page, BaseException):
                return FetchOutcome.failed(identifier, page)
            return FetchOutcome.content(identifier, page)
        finally:
            self.in_flight -= 1

    async def __aenter__(self) -> "StaticFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


def channel_page(feed: str) -> str:
    return (
        "<html><head><script>var ytInitialData = "
        f'{{"metadata":{{"channelMetadataRenderer":{{"title":"Example","rssUrl":"{feed}"}}}}}};'
        "</script></head><body></body></html>"
    )


@pytest.fixture(autouse=True)
def _quiet_structlog():
    """Drop log output in tests; ``capture_logs`` still sees every event."""
    structlog.configure(
        processors=[],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_fetcher():
    return StaticFetcher
