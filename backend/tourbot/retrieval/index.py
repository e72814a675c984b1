from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Generic, TypeVar

from .normalize import normalize_text, search_key, tokenize

T = TypeVar("T")

DEFAULT_MATCH_THRESHOLD = 0.35
# Longer queries are scored in chunks of at most this many characters.
MAX_PATTERN_LENGTH = 32
# Only this many trailing characters of a query are scored.
MAX_QUERY_LENGTH = 128
# Shorter patterns only ever match verbatim.
MIN_FUZZY_LENGTH = 5


def window_errors(pattern: str, text: str) -> int:
    """Fewest single-character edits turning ``pattern`` into some substring of ``text``."""
    previous = [0] * (len(text) + 1)
    for i, p_char in enumerate(pattern, 1):
        current = [i]
        for j, t_char in enumerate(text, 1):
            current.append(
                min(
                    previous[j - 1] + (p_char != t_char),
                    previous[j] + 1,
                    current[j - 1] + 1,
                )
            )
        previous = current
    return min(previous)


def _pattern_score(pattern: str, key: str) -> float:
    if pattern in key:
        return 0.0
    if len(pattern) < MIN_FUZZY_LENGTH:
        return 1.0
    return min(1.0, window_errors(pattern, key) / len(pattern))


def _chunks(query: str) -> list[str]:
    if len(query) <= MAX_PATTERN_LENGTH:
        return [query]
    count = -(-len(query) // MAX_PATTERN_LENGTH)
    size = -(-len(query) // count)
    return [query[start : start + size] for start in range(0, len(query), size)]


def match_score(normalized_query: str, key: str) -> float:
    """Distance in [0, 1] between a query and a search key; 0 is a perfect match.

    The score is the number of edits needed to align the query with its
    best window of the key, relative to the query length. A query
    contained verbatim in the key scores 0, and queries under
    ``MIN_FUZZY_LENGTH`` characters score 1 unless contained verbatim.
    Queries longer than ``MAX_PATTERN_LENGTH`` are split into even chunks
    whose scores are averaged, and only the last ``MAX_QUERY_LENGTH``
    characters are looked at, which is where the newest message sits.

    ``key`` is expected in the form produced by ``search_key()``.
    """
    query = " ".join(tokenize(normalized_query))[-MAX_QUERY_LENGTH:].strip()
    if not query or not key:
        return 1.0
    if query in key:
        return 0.0
    parts = _chunks(query)
    return round(sum(_pattern_score(part, key) for part in parts) / len(parts), 4)


class CorpusIndex(Generic[T]):
    """Read-only fuzzy index over one corpus.

    ``key_of`` extracts the searchable text of a record and is normalized
    once here. ``location_of`` extracts the text a location filter is
    matched against; corpora without one never match a location.
    """

    def __init__(
        self,
        name: str,
        records: Iterable[T],
        key_of: Callable[[T], str],
        location_of: Callable[[T], str] | None = None,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
    ) -> None:
        self.name = name
        self.threshold = threshold
        self.location_of = location_of
        self._entries: tuple[tuple[T, str], ...] = tuple(
            (record, search_key(key_of(record))) for record in records
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def records(self) -> list[T]:
        return [record for record, _ in self._entries]

    def scored_matches(
        self,
        normalized_query: str,
        limit: int,
        subset: Sequence[T] | None = None,
    ) -> list[tuple[T, float]]:
        if limit <= 0:
            return []
        entries = self._entries if subset is None else self._restrict(subset)
        if not normalized_query:
            return [(record, 0.0) for record, _ in entries[:limit]]
        scored: list[tuple[T, float]] = []
        for record, key in entries:
            score = match_score(normalized_query, key)
            if score <= self.threshold:
                scored.append((record, score))
        # sort is stable, so ties keep storage order
        scored.sort(key=lambda item: item[1])
        return scored[:limit]

    def top_matches(
        self,
        normalized_query: str,
        limit: int,
        subset: Sequence[T] | None = None,
    ) -> list[T]:
        return [record for record, _ in self.scored_matches(normalized_query, limit, subset)]

    def filter_by_location(self, location_name: str | None) -> list[T]:
        if not location_name or self.location_of is None:
            return []
        needle = normalize_text(location_name).strip()
        if not needle:
            return []
        return [
            record
            for record, _ in self._entries
            if needle in normalize_text(self.location_of(record))
        ]

    def _restrict(self, subset: Sequence[T]) -> tuple[tuple[T, str], ...]:
        wanted = {id(record) for record in subset}
        return tuple(entry for entry in self._entries if id(entry[0]) in wanted)
