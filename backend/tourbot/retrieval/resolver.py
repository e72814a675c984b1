from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .index import CorpusIndex, match_score
from .locations import HARD_TYPOS, CanonicalLocationTable, LocationDirectory, match_hard_typo
from .normalize import normalize_text, place_text, search_key, strip_non_alnum
from .types import HardTypo

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_THRESHOLD = 0.6
MIN_CITY_LENGTH = 3


class LocationResolver:
    """Resolve free text to a place name, trying each tier in order.

    1. curated hard-typo patterns
    2. canonical alias table, longest alias wins
    3. destination cities found in the query, longest city wins
    4. the destination whose city and name best match the query, unless its
       score is above the index threshold or ``fallback_threshold``

    ``None`` means nothing was asserted this turn, not that the user has no
    place in mind.
    """

    def __init__(
        self,
        directory: LocationDirectory | None = None,
        hard_typos: Sequence[HardTypo] = HARD_TYPOS,
        fallback_threshold: float = DEFAULT_FALLBACK_THRESHOLD,
    ) -> None:
        self.directory = directory if directory is not None else CanonicalLocationTable()
        self.hard_typos = tuple(hard_typos)
        self.fallback_threshold = fallback_threshold

    def resolve(
        self, text: str | None, destinations: CorpusIndex[Mapping[str, Any]] | None
    ) -> str | None:
        query = normalize_text(text)
        if not query.strip():
            return None

        typo_hit = match_hard_typo(query, self.hard_typos)
        if typo_hit:
            logger.debug("Location resolved via hard typo: %s", typo_hit)
            return typo_hit

        location = self.directory.best_alias_match(query)
        if location is not None:
            return location.canonical_name

        if destinations is None or not destinations:
            return None

        city = self._scan_destination_cities(query, destinations)
        if city:
            return city

        return self._fuzzy_destination(query, destinations)

    @staticmethod
    def _scan_destination_cities(
        query: str, destinations: CorpusIndex[Mapping[str, Any]]
    ) -> str | None:
        compact_query = strip_non_alnum(query)
        best_city: str | None = None
        best_len = 0
        for record in destinations.records:
            city = record.get("city")
            if not city:
                continue
            compact_city = strip_non_alnum(normalize_text(str(city)))
            if len(compact_city) < MIN_CITY_LENGTH:
                continue
            if len(compact_city) > best_len and compact_city in compact_query:
                best_city = str(city)
                best_len = len(compact_city)
        return best_city

    def _fuzzy_destination(
        self, query: str, destinations: CorpusIndex[Mapping[str, Any]]
    ) -> str | None:
        best: Mapping[str, Any] | None = None
        best_score = 1.0
        for record in destinations.records:
            key = search_key(place_text(record))
            if not key:
                continue
            score = match_score(query, key)
            if best is None or score < best_score:
                best, best_score = record, score
        if best is None:
            return None
        if best_score > destinations.threshold or best_score > self.fallback_threshold:
            logger.debug("Rejected fuzzy location guess (score=%.3f)", best_score)
            return None
        guess = best.get("city") or best.get("name")
        return str(guess) if guess else None
