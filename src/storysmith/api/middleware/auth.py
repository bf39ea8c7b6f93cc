"""Optional shared-secret check on inbound API calls."""

from __future__ import annotations

import hmac
import logging

from fastapi import Request, Response
from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.responses import JSONResponse

from storysmith.constants import (
    AUTH_EXEMPT_PATHS,
    AUTH_EXEMPT_PREFIXES,
    RELAY_CORS_HEADERS,
    RELAY_PATHS,
)

logger = logging.getLogger(__name__)


def _is_public(request: Request) -> bool:
    path = request.url.path
    return (
        request.method == "OPTIONS"
        or path in AUTH_EXEMPT_PATHS
        or path.startswith(AUTH_EXEMPT_PREFIXES)
    )


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require ``X-API-Key`` to match ``Settings.api_key`` when set.

    Preflights and health probes never need the key. Rejections use
    the relay's ``{"error": ...}`` body, and on relay paths they carry
    the relay's CORS headers so browser callers can read the 401.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        expected = request.app.state.settings.api_key
        if not expected or _is_public(request):
            return await call_next(request)

        provided = request.headers.get("X-API-Key", "")
        if hmac.compare_digest(provided, expected):
            return await call_next(request)

        path = request.url.path
        logger.info(
            "event=auth_rejected method=%s path=%s", request.method, path
        )
        headers = RELAY_CORS_HEADERS if path in RELAY_PATHS else None
        return JSONResponse(
            status_code=401,
            content={"error": "Invalid or missing API key"},
            headers=headers,
        )
