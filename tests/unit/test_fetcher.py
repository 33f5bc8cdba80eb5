"""Unit tests for the httpx-backed page fetcher."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from structlog.testing import capture_logs

from rssfinder.services.fetcher import HttpFetcher, _default_headers


def _fetcher(handler, max_attempts: int = 2) -> HttpFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpFetcher(client, max_attempts=max_attempts, base_delay=0.0, max_delay=0.0)


@pytest.mark.asyncio
async def test_fetch_returns_page_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>channel</html>")

    async with _fetcher(handler) as fetcher:
        outcome = await fetcher.fetch("https://www.youtube.com/@one")

    assert outcome.ok
    assert outcome.identifier == "https://www.youtube.com/@one"
    assert outcome.text == "<html>channel</html>"


@pytest.mark.asyncio
async def test_not_found_fails_without_retry() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        return httpx.Response(404)

    async with _fetcher(handler, max_attempts=3) as fetcher:
        outcome = await fetcher.fetch("https://www.youtube.com/@missing")

    assert not outcome.ok
    assert isinstance(outcome.error, httpx.HTTPStatusError)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_server_error_is_retried_then_succeeds() -> None:
    responses = iter([httpx.Response(503), httpx.Response(200, text="ok")])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    async with _fetcher(handler) as fetcher:
        outcome = await fetcher.fetch("https://www.youtube.com/@flaky")

    assert outcome.ok
    assert outcome.text == "ok"


@pytest.mark.asyncio
async def test_transport_error_becomes_failed_outcome() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _fetcher(handler) as fetcher:
        outcome = await fetcher.fetch("https://www.youtube.com/@down")

    assert outcome.status == "failed"
    assert isinstance(outcome.error, httpx.ConnectError)


def test_default_headers_look_like_a_browser() -> None:
    headers = _default_headers()

    assert "mozilla" in headers["User-Agent"].lower()
    assert headers["Accept-Language"].startswith("en")


@pytest.mark.asyncio
async def test_identifier_without_scheme_is_attempted_once() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        # The real transport rejects scheme-less URLs this way
        calls.append(request.url)
        raise httpx.UnsupportedProtocol(
            "Request URL is missing an 'http://' or 'https://' protocol.", request=request
        )

    async with _fetcher(handler, max_attempts=3) as fetcher:
        with patch("rssfinder.core.retry.asyncio.sleep", new=AsyncMock()) as sleep_mock:
            outcome = await fetcher.fetch("youtube.com/@nochannel")

    assert not outcome.ok
    assert isinstance(outcome.error, httpx.UnsupportedProtocol)
    assert len(calls) == 1
    sleep_mock.assert_not_awaited()


@pytest.mark.asyncio
async def test_retry_events_name_the_wrapped_call() -> None:
    responses = iter([httpx.Response(503), httpx.Response(200, text="ok")])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    async with _fetcher(handler) as fetcher:
        with capture_logs() as logs:
            await fetcher.fetch("https://www.youtube.com/@flaky")

    attempts = [log for log in logs if log["event"] == "retry.attempt"]
    assert len(attempts) == 1
    assert attempts[0]["func"] == "rate_limited_call"


@pytest.mark.parametrize(
    "kwargs",
    [{"max_attempts": 0}, {"rate_limit": 0.0}],
)
def test_zero_limits_are_rejected_not_replaced_by_defaults(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        HttpFetcher(httpx.AsyncClient(), **kwargs)
