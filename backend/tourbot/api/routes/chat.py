from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ...llm_client import (
    GeneratorAuthError,
    GeneratorError,
    GeneratorNotConfigured,
    GeneratorRateLimited,
)
from ...retrieval import InvalidMessageError, TravelChatEngine
from ...schemas import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


def get_engine(request: Request) -> TravelChatEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Chat engine is not ready")
    return engine


@router.post("/api/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, engine: TravelChatEngine = Depends(get_engine)) -> ChatResponse:
    try:
        result = await engine.chat(
            req.message,
            session_id=req.session_id,
            origin=req.origin,
            destination=req.destination,
            trip_type=req.trip_type,
        )
    except InvalidMessageError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except GeneratorNotConfigured as exc:
        raise HTTPException(
            status_code=503, detail="The LLM API key is not configured on the server"
        ) from exc
    except GeneratorAuthError as exc:
        raise HTTPException(
            status_code=500, detail="Authentication with the LLM API failed (check LLM_API_KEY)"
        ) from exc
    except GeneratorRateLimited as exc:
        raise HTTPException(
            status_code=429, detail="The LLM API rate limit was reached, please try again later"
        ) from exc
    except GeneratorError as exc:
        logger.error("Chat generation failed: %s", exc)
        raise HTTPException(status_code=500, detail=exc.detail or str(exc)) from exc

    return ChatResponse(
        reply=result.reply,
        session_id=result.session_id,
        intent=result.intent.value,
        active_location=result.active_location,
    )
