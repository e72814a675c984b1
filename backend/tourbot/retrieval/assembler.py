from __future__ import annotations

import copy
import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from typing import Any

from ..settings import ResultLimits
from .index import CorpusIndex
from .intent import IntentClassifier
from .loader import Corpora
from .locations import CanonicalLocationTable
from .normalize import normalize_text
from .prompts import (
    FLIGHT_INSTRUCTIONS,
    INTENT_RULES,
    SPECIAL_BLOCK_HEADINGS,
    STICKY_LOCATION_RULES,
)
from .resolver import LocationResolver
from .sessions import update_location
from .types import ContextPayload, FlightQuote, Session, SpecialBlock

logger = logging.getLogger(__name__)

DEFAULT_RECENCY_TURNS = 1
DEFAULT_SPECIAL_BLOCK_LIMIT = 8

FEATURED_DESTINATIONS = "featured_destinations"
LOCAL_DESTINATIONS = "local_destinations"

# "Which places are there?" with no place in mind yet.
_DESTINATION_LIST_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bnhung (diem den|dia diem|noi) nao\b"),
    re.compile(r"\bnen di dau\b"),
    re.compile(r"\bgoi y (cho minh |cho toi )?(diem den|dia diem|noi)\b"),
    re.compile(r"\b(diem den|dia diem|diem du lich) nao\b"),
    re.compile(r"\bwhere (should|can|to) (i |we )?go\b"),
    re.compile(r"\bwhat destinations\b"),
)

# "What is there to do here?" once a place is active.
_LOCAL_ACTIVITY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bchoi gi\b"),
    re.compile(r"\bco gi (de )?(choi|lam|xem|hay)\b"),
    re.compile(r"\btham quan (gi|dau|o dau)\b"),
    re.compile(r"\blam gi\b"),
    re.compile(r"\bdi dau\b"),
    re.compile(r"\b(things|what) to do\b"),
)


def _matches_any(patterns: Sequence[re.Pattern[str]], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


# payload records never share state with the loaded corpora
def _detached(records: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    return [copy.deepcopy(record) for record in records]


def _coordinate(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value)
        except ValueError:
            return None
    return None


class ContextAssembler:
    """Turn one user message plus session state into a bounded generator payload.

    The corpora are injected once and only read. Every lookup that finds
    nothing degrades to an empty list or ``None``; nothing here raises for
    missing data.
    """

    def __init__(
        self,
        corpora: Corpora,
        resolver: LocationResolver | None = None,
        classifier: IntentClassifier | None = None,
        locations: CanonicalLocationTable | None = None,
        limits: ResultLimits | None = None,
        recency_turns: int = DEFAULT_RECENCY_TURNS,
        special_block_limit: int = DEFAULT_SPECIAL_BLOCK_LIMIT,
    ) -> None:
        self.corpora = corpora
        self.resolver = resolver or LocationResolver()
        self.classifier = classifier or IntentClassifier()
        self.locations = locations if locations is not None else CanonicalLocationTable()
        self.limits = limits or ResultLimits()
        self.recency_turns = max(0, recency_turns)
        self.special_block_limit = max(0, special_block_limit)

    def assemble(
        self,
        turn_text: str,
        session: Session,
        origin: str | None = None,
        destination: str | None = None,
        trip_type: str | None = None,
    ) -> ContextPayload:
        """Build the payload for ``turn_text``.

        Updates ``session.last_location`` when a place is detected. The turn
        itself is not appended to the history; callers do that afterwards so
        the recency window only sees earlier turns.
        """
        intent = self.classifier.classify(turn_text)
        detected = self.resolver.resolve(turn_text, self.corpora.destinations)
        update_location(session, detected)
        active = session.last_location

        previous = self.recent_user_messages(session)
        query = normalize_text("\n".join([*previous, turn_text]))

        corpora = self.corpora
        limits = self.limits
        payload = ContextPayload(
            intent=intent,
            active_location=active,
            previous_user_message=previous[-1] if previous else None,
            current_message=turn_text,
            destinations_results=self.retrieve(corpora.destinations, query, limits.destinations, active),
            foods_results=self.retrieve(corpora.foods, query, limits.foods, active),
            tours_results=self.retrieve(corpora.tours, query, limits.tours, active),
            policies_results=self.retrieve(corpora.policies, query, limits.policies, active),
            tips_results=self.retrieve(corpora.tips, query, limits.tips, active),
            active_coordinates=self.coordinates_for(active),
            special_block=self.special_block(turn_text, active),
            flight_quote=self.flight_quote(origin, destination, trip_type),
            detected_location=detected,
        )
        logger.debug(
            "Assembled context for session %s: intent=%s location=%s",
            session.id,
            intent.value,
            active,
        )
        return payload

    def recent_user_messages(self, session: Session) -> list[str]:
        if self.recency_turns == 0:
            return []
        turns = session.user_turns()[-self.recency_turns :]
        return [turn.content for turn in turns]

    @staticmethod
    def retrieve(
        index: CorpusIndex[dict[str, Any]],
        query: str,
        limit: int,
        location: str | None,
    ) -> list[dict[str, Any]]:
        if not index or limit <= 0:
            return []
        base: list[dict[str, Any]] | None = None
        if location:
            filtered = index.filter_by_location(location)
            if filtered:
                base = filtered
        matches = index.top_matches(query, limit, subset=base)
        if not matches:
            pool = base if base is not None else index.records
            matches = pool[:limit]
        return _detached(matches)

    def coordinates_for(self, location_name: str | None) -> tuple[float, float] | None:
        if not location_name:
            return None
        location = self.locations.find_by_name(location_name)
        if location is not None and location.lat is not None and location.lng is not None:
            return (location.lat, location.lng)
        for record in self.corpora.destinations.filter_by_location(location_name):
            lat = _coordinate(record.get("lat"))
            lng = _coordinate(record.get("lng"))
            if lat is not None and lng is not None:
                return (lat, lng)
        return None

    def special_block(self, turn_text: str, active: str | None) -> SpecialBlock | None:
        if self.special_block_limit == 0:
            return None
        text = normalize_text(turn_text)
        if not active and _matches_any(_DESTINATION_LIST_PATTERNS, text):
            items = self._featured_destinations()
            if items:
                return SpecialBlock(kind=FEATURED_DESTINATIONS, items=_detached(items))
            return None
        if active and _matches_any(_LOCAL_ACTIVITY_PATTERNS, text):
            items = self.corpora.destinations.filter_by_location(active)
            if items:
                return SpecialBlock(
                    kind=LOCAL_DESTINATIONS,
                    items=_detached(items[: self.special_block_limit]),
                    location=active,
                )
        return None

    def _featured_destinations(self) -> list[dict[str, Any]]:
        seen: set[str] = set()
        featured: list[dict[str, Any]] = []
        for record in self.corpora.destinations.records:
            city = normalize_text(str(record.get("city") or record.get("name") or ""))
            if city in seen:
                continue
            seen.add(city)
            featured.append(record)
            if len(featured) >= self.special_block_limit:
                break
        return featured

    def flight_quote(
        self, origin: str | None, destination: str | None, trip_type: str | None
    ) -> FlightQuote | None:
        if not origin or not destination:
            return None
        return self.corpora.flights.quote(origin, destination, trip_type)


# ---------- payload rendering ----------


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def flight_block(quote: FlightQuote) -> dict[str, Any]:
    return {
        "route": quote.route,
        "originCode": quote.origin_code,
        "destinationCode": quote.destination_code,
        "from": quote.origin_name,
        "to": quote.destination_name,
        "tripType": quote.trip_type,
        "currency": quote.currency,
        "low": quote.low,
        "high": quote.high,
        "note": quote.note,
    }


def payload_to_dict(payload: ContextPayload) -> dict[str, Any]:
    data: dict[str, Any] = {
        "intent": payload.intent.value,
        "activeLocation": payload.active_location,
        "destinationsResults": payload.destinations_results,
        "foodsResults": payload.foods_results,
        "toursResults": payload.tours_results,
        "policiesResults": payload.policies_results,
        "tipsResults": payload.tips_results,
    }
    if payload.active_coordinates is not None:
        lat, lng = payload.active_coordinates
        data["activeCoordinates"] = {"lat": lat, "lng": lng}
    if payload.special_block is not None:
        data["specialBlock"] = asdict(payload.special_block)
    if payload.flight_quote is not None:
        data["flightBlock"] = flight_block(payload.flight_quote)
    return data


def _format_amount(value: float | None, currency: str) -> str:
    if value is None:
        return "?"
    return f"{value:,.0f} {currency}"


def render_flight_section(quote: FlightQuote) -> str:
    kind = "one-way" if quote.trip_type == "oneway" else "round-trip"
    lines = [
        "FLIGHT ESTIMATE (reference only):",
        f"- Route: {quote.origin_name} ({quote.origin_code}) → {quote.destination_name} ({quote.destination_code})",
        f"- Ticket type: {kind}",
        f"- Price per person: {_format_amount(quote.low, quote.currency)} – {_format_amount(quote.high, quote.currency)}",
    ]
    if quote.note:
        lines.append(f"- Note: {quote.note}")
    lines.append("")
    lines.append(FLIGHT_INSTRUCTIONS)
    return "\n".join(lines)


def _section(title: str, records: Sequence[Mapping[str, Any]] | Mapping[str, Any]) -> str:
    return f"{title} (JSON):\n{_dump(records)}"


def render_user_prompt(payload: ContextPayload) -> str:
    """Render ``payload`` as the user message sent alongside the system prompt."""
    parts = [
        f"INTENT: {payload.intent.value}",
        f"ACTIVE LOCATION: {payload.active_location or 'none'}",
    ]
    if payload.active_coordinates is not None:
        lat, lng = payload.active_coordinates
        parts.append(f"ACTIVE COORDINATES: {lat}, {lng}")
    parts.append(f"PREVIOUS USER MESSAGE: {payload.previous_user_message or 'none'}")
    parts.append(f"CURRENT MESSAGE: {payload.current_message}")
    parts.append(INTENT_RULES.strip())
    parts.append(STICKY_LOCATION_RULES.strip())
    parts.append(_section("DESTINATIONS", payload.destinations_results))
    parts.append(_section("FOODS", payload.foods_results))
    parts.append(_section("TOURS", payload.tours_results))
    parts.append(_section("POLICIES", payload.policies_results))
    parts.append(_section("TIPS", payload.tips_results))
    block = payload.special_block
    if block is not None:
        heading = SPECIAL_BLOCK_HEADINGS.get(block.kind, block.kind.upper())
        if block.location:
            heading = f"{heading}: {block.location}"
        parts.append(_section(heading, block.items))
    if payload.flight_quote is not None:
        parts.append(render_flight_section(payload.flight_quote))
    return "\n\n".join(parts)
