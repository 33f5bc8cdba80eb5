"""Error taxonomy for the fetch/extract pipeline."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


class RssFinderError(Exception):
    """Base class for rssfinder errors.

    ``identifier`` and ``stage`` attribute the error to one unit of work so the
    combined report can name where each failure came from.
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: str | None = None,
        stage: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.identifier = identifier
        self.stage = stage
        self.hint = hint


class EmptyInputError(RssFinderError):
    """No identifiers were submitted."""


class FetchError(RssFinderError):
    """Transport or content-decoding failure while retrieving a page."""


class NoValueFoundError(RssFinderError):
    """No fragment of the page contained the marker followed by a quoted value."""


class OutputError(RssFinderError):
    """Writing results failed. The only error that is fatal to a whole run."""


@dataclass(frozen=True)
class FailureEntry:
    identifier: str
    error: RssFinderError


def _cause_chain(error: BaseException) -> list[str]:
    chain: list[str] = []
    current: BaseException | None = error.__cause__
    while current is not None:
        text = str(current) or type(current).__name__
        chain.append(f"{type(current).__name__}: {text}")
        current = current.__cause__
    return chain


class AggregatedFailure(RssFinderError):
    """Every failure from one run, in the order the failing stages completed."""

    def __init__(self, first: FailureEntry) -> None:
        super().__init__("Could not extract RSS feed", stage="aggregate")
        self._entries: list[FailureEntry] = [first]

    def append(self, entry: FailureEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> tuple[FailureEntry, ...]:
        return tuple(self._entries)

    @property
    def identifiers(self) -> list[str]:
        return [entry.identifier for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FailureEntry]:
        return iter(self._entries)

    def render(self) -> str:
        """Human-readable report: one block per failing identifier with its cause chain."""
        count = len(self._entries)
        lines = [f"{self.message}: {count} failure{'s' if count != 1 else ''}"]
        for index, entry in enumerate(self._entries, start=1):
            stage = entry.error.stage or "unknown"
            lines.append(f"[{index}] {entry.identifier} ({stage})")
            lines.append(f"    {entry.error.message}")
            if entry.error.hint:
                lines.append(f"    hint: {entry.error.hint}")
            for cause in _cause_chain(entry.error):
                lines.append(f"    caused by: {cause}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
