from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .types import FlightEstimate, FlightQuote

logger = logging.getLogger(__name__)

ONE_WAY = "oneway"
ROUND_TRIP = "roundtrip"


def _number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def estimate_from_record(raw: Mapping[str, Any]) -> FlightEstimate | None:
    route_code = str(raw.get("routeCode") or "").strip()
    if not route_code:
        return None
    return FlightEstimate(
        route_code=route_code,
        origin_name=str(raw.get("from") or ""),
        destination_name=str(raw.get("to") or ""),
        currency=str(raw.get("currency") or "VND"),
        one_way_low=_number(raw.get("oneWayLow")),
        one_way_high=_number(raw.get("oneWayHigh")),
        round_trip_low=_number(raw.get("roundTripLow")),
        round_trip_high=_number(raw.get("roundTripHigh")),
        note=str(raw.get("note") or ""),
    )


def normalize_trip_type(trip_type: str | None) -> str:
    return ONE_WAY if (trip_type or "").strip().lower() == ONE_WAY else ROUND_TRIP


class FlightEstimateTable:
    """Route price bands keyed by ``ORIGIN-DEST`` codes, usable in both directions."""

    def __init__(self, estimates: Iterable[FlightEstimate] = ()) -> None:
        self.estimates: tuple[FlightEstimate, ...] = tuple(estimates)
        self._by_route = {e.route_code.upper(): e for e in reversed(self.estimates)}

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> FlightEstimateTable:
        estimates: list[FlightEstimate] = []
        for raw in records:
            if not isinstance(raw, Mapping):
                continue
            estimate = estimate_from_record(raw)
            if estimate is None:
                logger.warning("Skipping flight estimate without routeCode: %r", raw)
                continue
            estimates.append(estimate)
        return cls(estimates)

    def __len__(self) -> int:
        return len(self.estimates)

    def find(self, origin: str | None, destination: str | None) -> FlightEstimate | None:
        if not origin or not destination or not self.estimates:
            return None
        o = origin.strip().upper()
        d = destination.strip().upper()
        return self._by_route.get(f"{o}-{d}") or self._by_route.get(f"{d}-{o}")

    def quote(
        self, origin: str | None, destination: str | None, trip_type: str | None = None
    ) -> FlightQuote | None:
        estimate = self.find(origin, destination)
        if estimate is None:
            return None
        kind = normalize_trip_type(trip_type)
        if kind == ONE_WAY:
            low, high = estimate.one_way_low, estimate.one_way_high
        else:
            low, high = estimate.round_trip_low, estimate.round_trip_high
        return FlightQuote(
            route=estimate.route_code,
            origin_code=(origin or "").strip().upper(),
            destination_code=(destination or "").strip().upper(),
            origin_name=estimate.origin_name,
            destination_name=estimate.destination_name,
            currency=estimate.currency,
            trip_type=kind,
            low=low,
            high=high,
            note=estimate.note,
        )
