"""Unit tests for the lock-guarded failure aggregator."""

import asyncio

import httpx
import pytest

from rssfinder.core.errors import AggregatedFailure, FetchError, NoValueFoundError
from rssfinder.services.aggregator import FailureAggregator
from rssfinder.services.types import StageFailure


def _failure(identifier: str, stage: str = "fetch") -> StageFailure:
    if stage == "fetch":
        error = FetchError(
            f"unable to retrieve content for {identifier}", identifier=identifier, stage="fetch"
        )
    else:
        error = NoValueFoundError(
            f"no embedded value found for {identifier}", identifier=identifier, stage="extract"
        )
    return StageFailure(identifier=identifier, error=error)


def test_finalize_without_failures_returns_none() -> None:
    assert FailureAggregator().finalize() is None


@pytest.mark.asyncio
async def test_first_failure_establishes_aggregate_and_rest_append() -> None:
    aggregator = FailureAggregator()

    await aggregator.record(_failure("a"))
    first = aggregator.finalize()
    await aggregator.record(_failure("b", stage="extract"))
    await aggregator.record(_failure("c"))

    aggregate = aggregator.finalize()
    assert isinstance(aggregate, AggregatedFailure)
    assert aggregate is first
    assert aggregate.identifiers == ["a", "b", "c"]
    assert [entry.error.stage for entry in aggregate] == ["fetch", "extract", "fetch"]


@pytest.mark.asyncio
async def test_concurrent_records_are_all_kept() -> None:
    aggregator = FailureAggregator()
    identifiers = [f"https://www.youtube.com/@c{i}" for i in range(50)]

    await asyncio.gather(*(aggregator.record(_failure(i)) for i in identifiers))

    aggregate = aggregator.finalize()
    assert aggregate is not None
    assert len(aggregate) == 50
    assert sorted(aggregate.identifiers) == sorted(identifiers)


@pytest.mark.asyncio
async def test_render_names_each_identifier_and_cause_chain() -> None:
    aggregator = FailureAggregator()
    failure = _failure("https://www.youtube.com/@gone")
    failure.error.__cause__ = httpx.ConnectError("connection refused")
    await aggregator.record(failure)
    await aggregator.record(_failure("https://example.com/page", stage="extract"))

    report = aggregator.finalize().render()

    assert report.startswith("Could not extract RSS feed: 2 failures")
    assert "[1] https://www.youtube.com/@gone (fetch)" in report
    assert "unable to retrieve content for https://www.youtube.com/@gone" in report
    assert "caused by: ConnectError: connection refused" in report
    assert "[2] https://example.com/page (extract)" in report
    assert "no embedded value found for https://example.com/page" in report
