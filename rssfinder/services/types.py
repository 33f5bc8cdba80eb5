"""Typed contracts for the fetch/extract pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from rssfinder.core.errors import AggregatedFailure, RssFinderError


@dataclass(frozen=True)
class FetchOutcome:
    identifier: str
    status: str  # "content" | "failed"
    text: str = ""
    error: BaseException | None = None

    @classmethod
    def content(cls, identifier: str, text: str) -> FetchOutcome:
        return cls(identifier=identifier, status="content", text=text)

    @classmethod
    def failed(cls, identifier: str, error: BaseException) -> FetchOutcome:
        return cls(identifier=identifier, status="failed", error=error)

    @property
    def ok(self) -> bool:
        return self.status == "content"


class Fetcher(Protocol):
    """Resolves one identifier to page text or a failure. Must not raise."""

    async def fetch(self, identifier: str) -> FetchOutcome: ...


@dataclass(frozen=True)
class StageSuccess:
    identifier: str
    value: str
    match_count: int = 1


@dataclass(frozen=True)
class StageFailure:
    identifier: str
    error: RssFinderError


StageOutcome = StageSuccess | StageFailure


@dataclass
class PipelineResult:
    successes: list[StageSuccess] = field(default_factory=list)
    failure: AggregatedFailure | None = None

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failure) if self.failure is not None else 0

    def rows(self) -> list[tuple[str, str]]:
        """(identifier, value) pairs for presentation."""
        return [(s.identifier, s.value) for s in self.successes]
