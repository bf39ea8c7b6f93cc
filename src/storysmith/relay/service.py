"""Prompt relay — one story operation in, one normalized reply out.

The relay is stateless: it validates the request, picks the vendor
for the requested model, builds the operation's prompt, makes exactly
one outbound call and reshapes the reply:

    analyze                    → AnalysisResult (validated JSON)
    apply_suggestions          → {"newStory": str}
    review_and_improve         → {"newStory": str}
    create_story_from_scratch  → {"title": str, "description": str}

Failures are raised as RelayError subclasses carrying the HTTP
status the endpoint reports; nothing is recovered locally.
"""

from __future__ import annotations

import json
import logging
import re
import time
import uuid
from typing import Any

from pydantic import ValidationError

from storysmith.api.schemas import (
    AnalysisResult,
    DraftedStory,
    NewStoryResult,
    RelayRequest,
)
from storysmith.config import Settings
from storysmith.constants import (
    ERR_INVALID_MODE,
    ERR_STORY_REQUIRED,
    ERR_SUGGESTIONS_REQUIRED,
    ERR_UNSUPPORTED_MODEL,
    ID_HEX_LENGTH,
    JSON_MODE_OPERATIONS,
    OperationMode,
)
from storysmith.logger import RelayLogger
from storysmith.prompts import build_prompt
from storysmith.relay.client import VendorClient
from storysmith.relay.vendors import resolve_vendor, vendor_credential
from storysmith.resilience.errors import (
    MalformedUpstreamOutputError,
    RelayError,
    RelayValidationError,
    classify_error,
)

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_relay_request(payload: Any) -> RelayRequest:
    """Validate a raw request body before any upstream work happens.

    The required-story and mode checks run first so their messages
    are stable regardless of what else is wrong with the body.
    """
    if not isinstance(payload, dict):
        raise RelayValidationError("Request body must be a JSON object.")
    story = payload.get("userStory")
    if not isinstance(story, str) or not story.strip():
        raise RelayValidationError(ERR_STORY_REQUIRED)
    mode = payload.get("operationMode")
    if mode not in {m.value for m in OperationMode}:
        raise RelayValidationError(ERR_INVALID_MODE)
    try:
        return RelayRequest.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first["loc"])
        raise RelayValidationError(
            f"Invalid request field '{where}': {first['msg']}"
        ) from exc


def _strip_fences(text: str) -> str:
    """Unwrap a ```json fenced block some vendors emit in JSON mode."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    return match.group(1) if match else stripped


def _load_json_object(text: str) -> dict[str, Any]:
    try:
        data = json.loads(_strip_fences(text))
    except json.JSONDecodeError as exc:
        raise MalformedUpstreamOutputError(
            "LLM returned invalid JSON.", raw_output=text
        ) from exc
    if not isinstance(data, dict):
        raise MalformedUpstreamOutputError(
            "LLM returned JSON that is not an object.", raw_output=text
        )
    return data


class RelayService:
    def __init__(
        self,
        vendor_client: VendorClient,
        settings: Settings,
        audit: RelayLogger | None = None,
    ) -> None:
        self._client = vendor_client
        self._settings = settings
        self._audit = audit

    async def handle(
        self, payload: Any, *, request_id: str | None = None
    ) -> dict[str, Any]:
        """Validate a raw body and run it."""
        request_id = request_id or uuid.uuid4().hex[:ID_HEX_LENGTH]
        try:
            request = parse_relay_request(payload)
        except RelayError as exc:
            self._log_failure(request_id, "validation", exc)
            raise
        return await self.execute(request, request_id=request_id)

    async def execute(
        self,
        request: RelayRequest,
        *,
        request_id: str | None = None,
    ) -> dict[str, Any]:
        """Run one relay operation and return the wire-shaped reply."""
        request_id = request_id or uuid.uuid4().hex[:ID_HEX_LENGTH]
        start = time.monotonic()
        mode = request.operation_mode
        model = request.llm_model.strip() or self._settings.default_llm_model
        vendor = "unknown"
        try:
            if not request.user_story.strip():
                raise RelayValidationError(ERR_STORY_REQUIRED)
            spec = resolve_vendor(model)
            if spec is None:
                raise RelayValidationError(ERR_UNSUPPORTED_MODEL)
            vendor = spec.family.value

            ticked = [s for s in request.suggestions if s.ticked]
            if mode == OperationMode.APPLY_SUGGESTIONS and not ticked:
                raise RelayValidationError(ERR_SUGGESTIONS_REQUIRED)

            api_key = vendor_credential(spec, self._settings)
            prompt = build_prompt(mode, request.user_story, ticked)
            raw = await self._client.complete(
                spec,
                api_key,
                model,
                prompt,
                json_mode=mode in JSON_MODE_OPERATIONS,
            )
            result = self._reshape(mode, raw)
        except RelayError as exc:
            self._log_failure(request_id, vendor, exc)
            raise

        duration_ms = round((time.monotonic() - start) * 1000, 1)
        logger.info(
            "event=relay_ok request_id=%s mode=%s model=%s duration_ms=%.1f",
            request_id,
            mode,
            model,
            duration_ms,
        )
        if self._audit is not None:
            self._audit.log_request(
                request_id=request_id,
                operation_mode=mode.value,
                model=model,
                vendor=vendor,
                story_chars=len(request.user_story),
                status_code=200,
                duration_ms=duration_ms,
            )
        return result

    def _reshape(self, mode: OperationMode, raw: str) -> dict[str, Any]:
        if mode == OperationMode.ANALYZE:
            data = _load_json_object(raw)
            try:
                analysis = AnalysisResult.model_validate(data)
            except ValidationError as exc:
                raise MalformedUpstreamOutputError(
                    "LLM analysis did not match the expected shape.",
                    raw_output=raw,
                ) from exc
            return analysis.with_kinds().to_wire()

        if mode == OperationMode.CREATE_STORY_FROM_SCRATCH:
            data = _load_json_object(raw)
            try:
                drafted = DraftedStory.model_validate(data)
            except ValidationError as exc:
                raise MalformedUpstreamOutputError(
                    "LLM draft did not contain a title and description.",
                    raw_output=raw,
                ) from exc
            if not drafted.title.strip() or not drafted.description.strip():
                raise MalformedUpstreamOutputError(
                    "LLM draft had an empty title or description.",
                    raw_output=raw,
                )
            return drafted.to_wire()

        new_story = raw.strip()
        if not new_story:
            raise MalformedUpstreamOutputError(
                "LLM returned an empty story.", raw_output=raw
            )
        return NewStoryResult(new_story=new_story).to_wire()

    def _log_failure(
        self, request_id: str, component: str, exc: RelayError
    ) -> None:
        error_class = classify_error(exc)
        if exc.status_code >= 500:
            logger.error(
                "event=relay_failed request_id=%s status=%d class=%s error=%s",
                request_id,
                exc.status_code,
                error_class.value,
                exc.message,
            )
        else:
            logger.info(
                "event=relay_rejected request_id=%s status=%d error=%s",
                request_id,
                exc.status_code,
                exc.message,
            )
        if self._audit is not None:
            self._audit.log_error(
                request_id=request_id,
                component=component,
                error=exc.message,
                error_class=error_class.value,
                status_code=exc.status_code,
            )
