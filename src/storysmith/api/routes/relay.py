"""Prompt relay route — POST /api/analyze-story."""

from __future__ import annotations

import json
import logging
import uuid

from fastapi import APIRouter, Depends, Request, Response
from starlette.responses import JSONResponse

from storysmith.api.dependencies import get_relay_service
from storysmith.constants import ID_HEX_LENGTH, RELAY_CORS_HEADERS
from storysmith.relay.service import RelayService
from storysmith.resilience.errors import RelayError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["relay"])


def _reply(
    content: dict[str, object], status_code: int, request_id: str
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={**RELAY_CORS_HEADERS, "X-Request-Id": request_id},
    )


@router.options("/analyze-story")
async def analyze_story_preflight() -> Response:
    """Permissive CORS preflight for browser callers."""
    return Response(status_code=200, headers=RELAY_CORS_HEADERS)


@router.post("/analyze-story")
async def analyze_story(
    request: Request,
    relay: RelayService = Depends(get_relay_service),
) -> JSONResponse:
    """Run one story operation against the selected LLM vendor."""
    request_id = uuid.uuid4().hex[:ID_HEX_LENGTH]
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _reply(
            {"error": "Request body must be valid JSON."}, 400, request_id
        )

    try:
        result = await relay.handle(payload, request_id=request_id)
    except RelayError as exc:
        return _reply(exc.to_dict(), exc.status_code, request_id)
    except Exception as exc:
        logger.exception(
            "event=relay_unhandled request_id=%s", request_id
        )
        return _reply(
            {"error": f"Internal error: {type(exc).__name__}"},
            500,
            request_id,
        )
    return _reply(result, 200, request_id)
