"""
clipvault.search — Ranked search over clipboard history.

Each entry is scored against the query on several fields and keeps its
best field score.  Per field the tiers are, highest first:

    exact  >  prefix  >  word/path boundary  >  substring  >  subsequence

and each tier is multiplied by the field's weight.  Entries scoring zero are
dropped; the rest are ordered by score, then by recency.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from clipvault.models.entry import HistoryEntry

# ---------------------------------------------------------------------------
# Field weights
# ---------------------------------------------------------------------------

CONTENT_WEIGHT = 10
LINK_TITLE_WEIGHT = 8
FILE_NAME_WEIGHT = 7
APP_NAME_WEIGHT = 6
BUNDLE_ID_WEIGHT = 5
TYPE_LABEL_WEIGHT = 4

# Characters that mark a word or path boundary in front of a match
_BOUNDARY_CHARS = (" ", ".", "/")


@dataclass(frozen=True)
class ScoredEntry:
    """An entry paired with its score for one search call."""

    entry: HistoryEntry
    score: int


def normalize_query(query: str) -> str:
    return query.strip().lower()


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def _subsequence_span(text: str, query: str) -> int | None:
    """Greedy left-to-right subsequence match.

    Returns the inclusive distance between the first and last matched
    characters, or ``None`` if *query* is not a subsequence of *text*.
    """
    first: int | None = None
    last = 0
    qi = 0
    for pos, ch in enumerate(text):
        if qi == len(query):
            break
        if ch == query[qi]:
            if first is None:
                first = pos
            last = pos
            qi += 1

    if qi < len(query) or first is None:
        return None
    return last - first + 1


def score_field(text: str, query: str, weight: int) -> int:
    """Score one lowercased field against a normalized query."""
    if not text or not query:
        return 0

    if text == query:
        return 100 * weight

    if query in text:
        if text.startswith(query):
            return 80 * weight
        if any(f"{sep}{query}" in text for sep in _BOUNDARY_CHARS):
            return 70 * weight
        return 60 * weight

    span = _subsequence_span(text, query)
    if span is None:
        return 0

    if len(query) <= 1:
        compactness = 1.0
    else:
        compactness = len(query) / max(span, len(query))
    return math.floor(40 * weight * compactness)


def _fields(entry: HistoryEntry) -> Iterable[tuple[str, int]]:
    yield entry.content, CONTENT_WEIGHT

    if entry.source_app is not None:
        yield entry.source_app.name, APP_NAME_WEIGHT
        tail = entry.source_app.bundle_tail
        if tail:
            yield tail, BUNDLE_ID_WEIGHT

    yield entry.type_label, TYPE_LABEL_WEIGHT

    for name in entry.file_names:
        yield name, FILE_NAME_WEIGHT

    if entry.link_metadata is not None and entry.link_metadata.title:
        yield entry.link_metadata.title, LINK_TITLE_WEIGHT


def score_entry(entry: HistoryEntry, query: str) -> int:
    """Return the best field score of *entry* for a normalized *query*."""
    return max(
        (score_field(text.lower(), query, weight) for text, weight in _fields(entry)),
        default=0,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def ranked(query: str, entries: Sequence[HistoryEntry]) -> list[ScoredEntry]:
    """Score and order *entries* for *query*, keeping the scores.

    An empty query yields every entry with a score of 0, in input order.
    """
    q = normalize_query(query)
    if not q:
        return [ScoredEntry(entry=e, score=0) for e in entries]

    scored = [ScoredEntry(entry=e, score=score_entry(e, q)) for e in entries]
    scored = [s for s in scored if s.score > 0]
    scored.sort(key=lambda s: (s.score, s.entry.timestamp), reverse=True)
    return scored


def search(query: str, entries: Sequence[HistoryEntry]) -> list[HistoryEntry]:
    """Return the entries matching *query*, most relevant first.

    If the trimmed, lowercased query is empty the entries come back
    unchanged, in their original order.
    """
    if not normalize_query(query):
        return list(entries)
    return [s.entry for s in ranked(query, entries)]
