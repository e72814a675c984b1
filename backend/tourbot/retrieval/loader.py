from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .flights import FlightEstimateTable
from .index import DEFAULT_MATCH_THRESHOLD, CorpusIndex
from .normalize import (
    city_of,
    destination_text,
    food_text,
    policy_text,
    tip_text,
    tour_destinations_of,
    tour_text,
)

logger = logging.getLogger(__name__)

Record = dict[str, Any]

DESTINATIONS_FILE = "destinations.json"
FOODS_FILE = "foods.json"
TOURS_FILE = "tours.json"
POLICIES_FILE = "policies.json"
TIPS_FILE = "travel_tips.json"
FLIGHTS_FILE = "flight_price_estimates.json"


def _empty_index(name: str) -> CorpusIndex[Record]:
    return CorpusIndex(name, [], key_of=lambda _: "")


@dataclass(frozen=True)
class Corpora:
    destinations: CorpusIndex[Record] = field(default_factory=lambda: _empty_index("destinations"))
    foods: CorpusIndex[Record] = field(default_factory=lambda: _empty_index("foods"))
    tours: CorpusIndex[Record] = field(default_factory=lambda: _empty_index("tours"))
    policies: CorpusIndex[Record] = field(default_factory=lambda: _empty_index("policies"))
    tips: CorpusIndex[Record] = field(default_factory=lambda: _empty_index("tips"))
    flights: FlightEstimateTable = field(default_factory=FlightEstimateTable)

    def sizes(self) -> dict[str, int]:
        return {
            "destinations": len(self.destinations),
            "foods": len(self.foods),
            "tours": len(self.tours),
            "policies": len(self.policies),
            "tips": len(self.tips),
            "flights": len(self.flights),
        }


def build_corpora(
    destinations: Sequence[Mapping[str, Any]] = (),
    foods: Sequence[Mapping[str, Any]] = (),
    tours: Sequence[Mapping[str, Any]] = (),
    policies: Sequence[Mapping[str, Any]] = (),
    tips: Sequence[Mapping[str, Any]] = (),
    flights: Sequence[Mapping[str, Any]] = (),
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> Corpora:
    return Corpora(
        destinations=CorpusIndex(
            "destinations", _records(destinations), destination_text, city_of, threshold
        ),
        foods=CorpusIndex("foods", _records(foods), food_text, city_of, threshold),
        tours=CorpusIndex("tours", _records(tours), tour_text, tour_destinations_of, threshold),
        policies=CorpusIndex("policies", _records(policies), policy_text, None, threshold),
        tips=CorpusIndex("tips", _records(tips), tip_text, None, threshold),
        flights=FlightEstimateTable.from_records(flights),
    )


def _records(raw: Sequence[Mapping[str, Any]]) -> list[Record]:
    return [dict(item) for item in raw if isinstance(item, Mapping)]


def _load_list(path: Path) -> list[Record]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Corpus file %s not found; using an empty corpus", path)
        return []
    except (OSError, ValueError):
        logger.warning("Could not read corpus file %s; using an empty corpus", path, exc_info=True)
        return []
    if not isinstance(payload, list):
        logger.warning("Corpus file %s is not a JSON list; using an empty corpus", path)
        return []
    return [item for item in payload if isinstance(item, dict)]


def load_corpora(data_dir: Path, threshold: float = DEFAULT_MATCH_THRESHOLD) -> Corpora:
    corpora = build_corpora(
        destinations=_load_list(data_dir / DESTINATIONS_FILE),
        foods=_load_list(data_dir / FOODS_FILE),
        tours=_load_list(data_dir / TOURS_FILE),
        policies=_load_list(data_dir / POLICIES_FILE),
        tips=_load_list(data_dir / TIPS_FILE),
        flights=_load_list(data_dir / FLIGHTS_FILE),
        threshold=threshold,
    )
    for name, count in corpora.sizes().items():
        logger.info("Loaded %s: %d records", name, count)
    return corpora
