"""Location-aware retrieval and context assembly for the travel chatbot."""

from .assembler import ContextAssembler, payload_to_dict, render_user_prompt
from .engine import InvalidMessageError, TravelChatEngine
from .index import CorpusIndex
from .intent import IntentClassifier, classify_intent
from .loader import Corpora, build_corpora, load_corpora
from .locations import CanonicalLocationTable
from .normalize import normalize_text
from .resolver import LocationResolver
from .sessions import InMemorySessionRepository
from .types import ChatReply, ContextPayload, Intent, Location, Session

__all__ = [
    "CanonicalLocationTable",
    "ChatReply",
    "ContextAssembler",
    "ContextPayload",
    "Corpora",
    "CorpusIndex",
    "InMemorySessionRepository",
    "Intent",
    "IntentClassifier",
    "InvalidMessageError",
    "Location",
    "LocationResolver",
    "Session",
    "TravelChatEngine",
    "build_corpora",
    "classify_intent",
    "load_corpora",
    "normalize_text",
    "payload_to_dict",
    "render_user_prompt",
]
