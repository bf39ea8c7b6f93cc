"""Async HTTP client for upstream LLM vendors.

One call per invocation: no retries, no fallback to another vendor.
The httpx.AsyncClient is created by the app lifespan and injected,
so tests can swap in an httpx.MockTransport.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from storysmith.config import Settings
from storysmith.relay.vendors import VendorSpec
from storysmith.resilience.errors import (
    MalformedUpstreamOutputError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


class VendorClient:
    def __init__(
        self, http: httpx.AsyncClient, settings: Settings
    ) -> None:
        self._http = http
        self._settings = settings

    async def complete(
        self,
        spec: VendorSpec,
        api_key: str,
        model: str,
        prompt: str,
        *,
        json_mode: bool,
    ) -> str:
        """Send prompt to the vendor and return its raw text reply.

        Raises UpstreamError for non-2xx, transport failures and
        timeouts; MalformedUpstreamOutputError if the reply envelope
        is not the vendor's documented shape.
        """
        req = spec.build_request(
            self._settings, api_key, model, prompt, json_mode
        )
        try:
            response = await self._http.post(
                req.url,
                headers=req.headers,
                params=req.params,
                json=req.body,
                timeout=self._settings.llm_timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(
                f"LLM API timed out after "
                f"{self._settings.llm_timeout_seconds:g}s",
                status_code=504,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"LLM API unreachable: {type(exc).__name__}",
                status_code=502,
            ) from exc

        if response.is_error:
            message = _error_message(spec, response)
            logger.warning(
                "event=vendor_error vendor=%s model=%s status=%d",
                spec.family,
                model,
                response.status_code,
            )
            raise UpstreamError(
                f"LLM API error: {message}",
                status_code=response.status_code,
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise MalformedUpstreamOutputError(
                "LLM API returned a non-JSON envelope.",
                raw_output=response.text,
            ) from exc
        if not isinstance(payload, dict):
            raise MalformedUpstreamOutputError(
                "LLM API returned an unexpected envelope.",
                raw_output=response.text,
            )
        return spec.extract_text(payload)


def _error_message(spec: VendorSpec, response: httpx.Response) -> str:
    """Vendor's own error message, else the HTTP reason phrase."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = spec.extract_error(payload)
        if message:
            return message
    return response.reason_phrase or f"HTTP {response.status_code}"
