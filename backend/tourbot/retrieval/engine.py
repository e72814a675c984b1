from __future__ import annotations

import logging
from pathlib import Path

from ..llm_client import ChatGenerator, OpenAICompatibleGenerator
from ..settings import Settings, settings
from .assembler import ContextAssembler, render_user_prompt
from .intent import IntentClassifier
from .loader import Corpora, load_corpora
from .locations import CanonicalLocationTable
from .prompts import EMPTY_REPLY_FALLBACK, TRAVEL_SYSTEM_PROMPT
from .resolver import LocationResolver
from .sessions import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_SESSION_ID,
    InMemorySessionRepository,
    SessionRepository,
    append_turn,
)
from .types import ChatReply

logger = logging.getLogger(__name__)


class InvalidMessageError(ValueError):
    pass


class TravelChatEngine:
    """One chat turn: assemble context, call the generator, record the exchange.

    Each session's read-modify-write runs under that session's lock. The
    generator call happens outside the lock, so a failed or cancelled call
    leaves the user turn and any location update committed.
    """

    def __init__(
        self,
        assembler: ContextAssembler,
        generator: ChatGenerator,
        sessions: SessionRepository | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        system_prompt: str = TRAVEL_SYSTEM_PROMPT,
    ) -> None:
        self.assembler = assembler
        self.generator = generator
        self.sessions = sessions if sessions is not None else InMemorySessionRepository()
        self.history_limit = history_limit
        self.system_prompt = system_prompt

    @property
    def corpora(self) -> Corpora:
        return self.assembler.corpora

    @classmethod
    def from_corpora(
        cls,
        corpora: Corpora,
        generator: ChatGenerator,
        config: Settings | None = None,
        sessions: SessionRepository | None = None,
    ) -> TravelChatEngine:
        config = config or settings
        locations = CanonicalLocationTable()
        assembler = ContextAssembler(
            corpora,
            resolver=LocationResolver(
                locations, fallback_threshold=config.LOCATION_FALLBACK_THRESHOLD
            ),
            classifier=IntentClassifier(),
            locations=locations,
            limits=config.parsed_result_limits,
            recency_turns=config.RECENCY_TURNS,
            special_block_limit=config.SPECIAL_BLOCK_LIMIT,
        )
        return cls(assembler, generator, sessions=sessions, history_limit=config.HISTORY_LIMIT)

    @classmethod
    def default(
        cls,
        config: Settings | None = None,
        generator: ChatGenerator | None = None,
        data_dir: Path | None = None,
    ) -> TravelChatEngine:
        config = config or settings
        corpora = load_corpora(
            data_dir or config.data_dir, threshold=config.INDEX_MATCH_THRESHOLD
        )
        if generator is None:
            generator = OpenAICompatibleGenerator(config)
        return cls.from_corpora(corpora, generator, config=config)

    async def chat(
        self,
        text: str,
        session_id: str | None = None,
        origin: str | None = None,
        destination: str | None = None,
        trip_type: str | None = None,
    ) -> ChatReply:
        if not isinstance(text, str) or not text.strip():
            raise InvalidMessageError("message must be a non-empty string")
        sid = (session_id or "").strip() or DEFAULT_SESSION_ID

        async with self.sessions.lock(sid):
            session = self.sessions.get_or_create(sid)
            payload = self.assembler.assemble(
                text, session, origin=origin, destination=destination, trip_type=trip_type
            )
            append_turn(session, "user", text, self.history_limit)
            self.sessions.save(session)

        reply = await self.generator.generate(self.system_prompt, render_user_prompt(payload))
        if not reply.strip():
            logger.warning("Generator returned an empty reply for session %s", sid)
            reply = EMPTY_REPLY_FALLBACK

        async with self.sessions.lock(sid):
            session = self.sessions.get_or_create(sid)
            append_turn(session, "assistant", reply, self.history_limit)
            self.sessions.save(session)

        return ChatReply(
            reply=reply,
            session_id=sid,
            intent=payload.intent,
            active_location=payload.active_location,
        )
