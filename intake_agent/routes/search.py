from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from intake_agent.config import get_settings
from intake_agent.logging.flight_recorder import FlightRecorder
from intake_agent.models.search import SearchRequest, SearchResponse
from intake_agent.services.orchestrator import IntakeOrchestrator
from intake_agent.services.text_generator import TextGenerator, build_generator

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def _shared_generator() -> Optional[TextGenerator]:
    return build_generator(get_settings())


def get_orchestrator(request: Request) -> IntakeOrchestrator:
    recorder = getattr(request.state, "flight_recorder", None) or FlightRecorder()
    return IntakeOrchestrator(generator=_shared_generator(), recorder=recorder, settings=get_settings())


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/ai-search")
async def ai_search(request: Request, orchestrator: IntakeOrchestrator = Depends(get_orchestrator)):
    try:
        payload: Dict[str, Any] = await request.json()
    except ValueError:
        return _error(400, "Request body must be JSON")
    if not isinstance(payload, dict):
        return _error(400, "Request body must be a JSON object")

    try:
        body = SearchRequest.model_validate(payload)
    except ValidationError as exc:
        logger.info("search.invalid_request %s", exc.errors())
        return _error(400, "Invalid request body")

    if not body.query or not body.query.strip():
        return _error(400, "Query is required")
    if len(body.query) > get_settings().max_query_chars:
        return _error(400, "Query is too long")

    context = body.context
    history = body.conversation_history or (context.conversation_history if context else [])

    try:
        result = await orchestrator.evaluate_turn(body.query, history, context)
    except Exception as exc:  # noqa: BLE001
        logger.exception("search.unexpected_error %s", exc)
        return _error(500, "Failed to process search query")

    response = SearchResponse(
        message=result.message,
        entity_type=result.entity_type,
        collected_details=result.collected_details,
        ready_to_handoff=result.ready_to_handoff,
        context=result.context,
    )
    return JSONResponse(content=response.model_dump(mode="json", by_alias=True))
