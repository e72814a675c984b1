from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.routes import chat as chat_routes
from .api.routes import flights as flight_routes
from .logging_config import configure_structlog, get_logger
from .retrieval import TravelChatEngine
from .settings import settings
from .utils import add_cors, add_request_id_tracing

# Configure structured logging (must be done before any logging calls)
configure_structlog(json_logs=not settings.DEBUG)

logger = get_logger(__name__)

EngineFactory = Callable[[], TravelChatEngine]


def create_app(engine_factory: EngineFactory = TravelChatEngine.default) -> FastAPI:
    """Build the API; the engine is created by ``engine_factory`` at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine = engine_factory()
        app.state.engine = engine
        logger.info(
            "engine_ready",
            corpora=engine.corpora.sizes(),
            generator_configured=_generator_configured(engine),
        )
        try:
            yield
        finally:
            aclose = getattr(engine.generator, "aclose", None)
            if aclose is not None:
                await aclose()
            app.state.engine = None

    app = FastAPI(
        title="Tour Chatbot API",
        version="0.1.0",
        description="Location-aware travel chat assistant",
        lifespan=lifespan,
    )
    add_cors(app)
    add_request_id_tracing(app)

    app.include_router(chat_routes.router)
    app.include_router(flight_routes.router)

    @app.get("/health")
    async def health() -> dict:
        engine: TravelChatEngine | None = getattr(app.state, "engine", None)
        if engine is None:
            return {"status": "starting", "service": "tourbot", "version": "0.1.0"}
        return {
            "status": "ok",
            "service": "tourbot",
            "version": "0.1.0",
            "corpora": engine.corpora.sizes(),
            "generatorConfigured": _generator_configured(engine),
        }

    return app


def _generator_configured(engine: TravelChatEngine) -> bool:
    # generators without a ``configured`` flag are assumed ready
    return bool(getattr(engine.generator, "configured", True))


app = create_app()
