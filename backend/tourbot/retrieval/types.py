from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Intent(str, Enum):
    FOOD = "food"
    PLACE = "place"
    TIPS = "tips"
    MIXED = "mixed"
    OTHER = "other"


@dataclass(frozen=True)
class Location:
    id: str
    canonical_name: str
    aliases: tuple[str, ...] = ()
    lat: float | None = None
    lng: float | None = None

    @property
    def candidate_names(self) -> tuple[str, ...]:
        return (self.canonical_name, *self.aliases)


@dataclass(frozen=True)
class HardTypo:
    canonical_name: str
    patterns: tuple[str, ...]


@dataclass
class Turn:
    role: str
    content: str


@dataclass
class Session:
    id: str
    last_location: str | None = None
    history: list[Turn] = field(default_factory=list)

    def user_turns(self) -> list[Turn]:
        return [turn for turn in self.history if turn.role == "user"]


@dataclass(frozen=True)
class FlightEstimate:
    route_code: str
    origin_name: str
    destination_name: str
    currency: str
    one_way_low: float | None = None
    one_way_high: float | None = None
    round_trip_low: float | None = None
    round_trip_high: float | None = None
    note: str = ""


@dataclass(frozen=True)
class FlightQuote:
    route: str
    origin_code: str
    destination_code: str
    origin_name: str
    destination_name: str
    currency: str
    trip_type: str
    low: float | None
    high: float | None
    note: str


@dataclass
class SpecialBlock:
    kind: str
    items: list[dict[str, Any]]
    location: str | None = None


@dataclass
class ContextPayload:
    intent: Intent
    active_location: str | None
    previous_user_message: str | None
    current_message: str
    destinations_results: list[dict[str, Any]] = field(default_factory=list)
    foods_results: list[dict[str, Any]] = field(default_factory=list)
    tours_results: list[dict[str, Any]] = field(default_factory=list)
    policies_results: list[dict[str, Any]] = field(default_factory=list)
    tips_results: list[dict[str, Any]] = field(default_factory=list)
    active_coordinates: tuple[float, float] | None = None
    special_block: SpecialBlock | None = None
    flight_quote: FlightQuote | None = None
    detected_location: str | None = None


@dataclass(frozen=True)
class ChatReply:
    reply: str
    session_id: str
    intent: Intent
    active_location: str | None
