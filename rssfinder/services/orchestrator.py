"""Run the pipeline stage over every identifier with a fixed concurrency bound."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from rssfinder.core.config import settings
from rssfinder.core.errors import EmptyInputError
from rssfinder.services.aggregator import FailureAggregator
from rssfinder.services.stage import run_stage
from rssfinder.services.types import Fetcher, PipelineResult, StageFailure, StageOutcome, StageSuccess

logger = structlog.get_logger(__name__)


async def run_pipeline(
    identifiers: Sequence[str],
    fetcher: Fetcher,
    *,
    concurrency: int | None = None,
    marker: str | None = None,
    tag: str | None = None,
) -> PipelineResult:
    """Fetch and extract every identifier, at most ``concurrency`` at a time.

    A stage keeps its semaphore slot from the start of its fetch until its
    extraction finishes. Failures never cancel sibling stages; they are
    recorded as they complete and returned as one ``AggregatedFailure``.

    Raises:
        EmptyInputError: ``identifiers`` is empty. Nothing is fetched.
    """
    if not identifiers:
        raise EmptyInputError("at least one identifier is required", stage="input")

    bound = settings.FETCH_CONCURRENCY if concurrency is None else concurrency
    if bound < 1:
        raise ValueError("concurrency must be >= 1")

    semaphore = asyncio.Semaphore(bound)
    aggregator = FailureAggregator()

    async def _bounded(identifier: str) -> StageOutcome:
        async with semaphore:
            outcome = await run_stage(identifier, fetcher, marker=marker, tag=tag)
        if isinstance(outcome, StageFailure):
            await aggregator.record(outcome)
        return outcome

    logger.info("orchestrator.started", total=len(identifiers), concurrency=bound)
    outcomes = await asyncio.gather(*(_bounded(identifier) for identifier in identifiers))

    result = PipelineResult(
        successes=[outcome for outcome in outcomes if isinstance(outcome, StageSuccess)],
        failure=aggregator.finalize(),
    )
    if result.success_count + result.failure_count != len(identifiers):
        logger.error(
            "orchestrator.outcome_mismatch",
            total=len(identifiers),
            succeeded=result.success_count,
            failed=result.failure_count,
        )
    logger.info(
        "orchestrator.completed",
        total=len(identifiers),
        succeeded=result.success_count,
        failed=result.failure_count,
    )
    return result
