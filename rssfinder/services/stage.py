"""One pipeline stage: fetch a single page and pick its embedded value."""

from __future__ import annotations

import structlog

from rssfinder.core.config import settings
from rssfinder.core.errors import FetchError, NoValueFoundError
from rssfinder.core.metrics import multiple_values_total, stage_outcomes_total
from rssfinder.services.extractor import extract_values
from rssfinder.services.types import (
    Fetcher,
    FetchOutcome,
    StageFailure,
    StageOutcome,
    StageSuccess,
)

logger = structlog.get_logger(__name__)


async def run_stage(
    identifier: str,
    fetcher: Fetcher,
    *,
    marker: str | None = None,
    tag: str | None = None,
) -> StageOutcome:
    """Produce exactly one outcome for ``identifier``; never raises for fetch/extract problems."""
    try:
        outcome = await fetcher.fetch(identifier)
    except Exception as exc:
        # Fetchers should report failures, not raise them; keep the one-outcome contract anyway.
        logger.warning("pipeline_stage.fetcher_raised", identifier=identifier, error=str(exc)[:200])
        outcome = FetchOutcome.failed(identifier, exc)
    if not outcome.ok:
        error = FetchError(
            f"unable to retrieve content for {identifier}",
            identifier=identifier,
            stage="fetch",
        )
        error.__cause__ = outcome.error
        stage_outcomes_total.labels(outcome="fetch_failed").inc()
        return StageFailure(identifier=identifier, error=error)

    values = extract_values(
        outcome.text,
        marker=marker or settings.EXTRACT_MARKER,
        tag=tag or settings.EXTRACT_TAG,
    )
    if not values:
        stage_outcomes_total.labels(outcome="no_value").inc()
        return StageFailure(
            identifier=identifier,
            error=NoValueFoundError(
                f"no embedded value found for {identifier}",
                identifier=identifier,
                stage="extract",
                hint="Are you sure this is a youtube channel?",
            ),
        )

    if len(values) > 1:
        multiple_values_total.inc()
        logger.info(
            "pipeline_stage.multiple_values",
            identifier=identifier,
            count=len(values),
            using=values[0],
        )

    stage_outcomes_total.labels(outcome="success").inc()
    return StageSuccess(identifier=identifier, value=values[0], match_count=len(values))
