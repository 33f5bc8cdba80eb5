"""Collect failures from concurrently completing stages into one report."""

from __future__ import annotations

import asyncio

from rssfinder.core.errors import AggregatedFailure, FailureEntry
from rssfinder.services.types import StageFailure


class FailureAggregator:
    """Append-only failure accumulator shared by every stage of a run.

    ``record`` holds a lock so only one stage mutates the aggregate at a time.
    The first failure creates the ``AggregatedFailure``; later ones are appended
    in completion order.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._aggregate: AggregatedFailure | None = None

    async def record(self, failure: StageFailure) -> None:
        entry = FailureEntry(identifier=failure.identifier, error=failure.error)
        async with self._lock:
            if self._aggregate is None:
                self._aggregate = AggregatedFailure(entry)
            else:
                self._aggregate.append(entry)

    def finalize(self) -> AggregatedFailure | None:
        """The accumulated failures, or None when every stage succeeded."""
        return self._aggregate
