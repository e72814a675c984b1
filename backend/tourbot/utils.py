from __future__ import annotations

import logging
from contextvars import ContextVar
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .settings import settings

# Request id of the request being handled, readable from any coroutine it spawns
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def add_cors(app: FastAPI) -> None:
    origins = settings.allow_origins
    if not origins:
        # explicit opt-in; no middleware when nothing is configured
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an id.

    - reuses an incoming X-Request-ID header or generates a UUID
    - binds it into ``request_id_ctx`` so log events carry it
    - echoes it back in the X-Request-ID response header
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        token = request_id_ctx.set(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestIDLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        request_id = request_id_ctx.get("")
        record.request_id = request_id if request_id else "-"  # type: ignore[attr-defined]
        return True


def add_request_id_tracing(app: FastAPI) -> None:
    app.add_middleware(RequestIDMiddleware)
    logging.getLogger().addFilter(RequestIDLogFilter())
