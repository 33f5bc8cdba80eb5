"""Locate a quoted value embedded in inline script fragments of a page.

YouTube channel pages ship their metadata as a large JS object literal inside
``<script>`` tags, e.g. ``..."rssUrl":"https://www.youtube.com/feeds/videos.xml?channel_id=..."...``.
Parsing that literal properly is expensive and brittle, so each fragment is
scanned with plain substring searches instead:

    SEEK_MARKER -> SEEK_COLON -> SEEK_OPEN_QUOTE -> SEEK_CLOSE_QUOTE

A fragment that falls out of the scan at any state simply contributes nothing.
"""

from __future__ import annotations

from enum import Enum

from bs4 import BeautifulSoup

from rssfinder.core.config import settings


class ScanState(Enum):
    SEEK_MARKER = "seek_marker"
    SEEK_COLON = "seek_colon"
    SEEK_OPEN_QUOTE = "seek_open_quote"
    SEEK_CLOSE_QUOTE = "seek_close_quote"
    DONE = "done"


def find(haystack: str, needle: str, start: int = 0) -> int | None:
    """Offset of the first ``needle`` at or after ``start``, or None."""
    offset = haystack.find(needle, start)
    return None if offset < 0 else offset


def candidate_fragments(content: str, tag: str) -> list[str]:
    """Inner content of every ``tag`` element, in document order."""
    soup = BeautifulSoup(content, "html.parser")
    return [element.decode_contents() for element in soup.find_all(tag)]


def scan_fragment(fragment: str, marker: str) -> str | None:
    """Return the first quoted value following ``marker:`` in one fragment."""
    state = ScanState.SEEK_MARKER
    cursor = 0
    value_start = 0
    while state is not ScanState.DONE:
        if state is ScanState.SEEK_MARKER:
            offset = find(fragment, marker, cursor)
            if offset is None:
                return None
            cursor = offset + len(marker)
            state = ScanState.SEEK_COLON
        elif state is ScanState.SEEK_COLON:
            offset = find(fragment, ":", cursor)
            if offset is None:
                return None
            cursor = offset
            state = ScanState.SEEK_OPEN_QUOTE
        elif state is ScanState.SEEK_OPEN_QUOTE:
            offset = find(fragment, '"', cursor)
            if offset is None:
                return None
            value_start = offset + 1
            cursor = value_start
            state = ScanState.SEEK_CLOSE_QUOTE
        elif state is ScanState.SEEK_CLOSE_QUOTE:
            offset = find(fragment, '"', cursor)
            if offset is None:
                return None
            cursor = offset
            state = ScanState.DONE
    return fragment[value_start:cursor]


def extract_from_fragments(fragments: list[str], marker: str) -> list[str]:
    """Scan every fragment independently; at most one value per fragment."""
    values: list[str] = []
    for fragment in fragments:
        value = scan_fragment(fragment, marker)
        if value is not None:
            values.append(value)
    return values


def extract_values(
    content: str,
    *,
    marker: str | None = None,
    tag: str | None = None,
) -> list[str]:
    """Every embedded value found in ``content``, in document order."""
    marker = marker or settings.EXTRACT_MARKER
    tag = tag or settings.EXTRACT_TAG
    return extract_from_fragments(candidate_fragments(content, tag), marker)
