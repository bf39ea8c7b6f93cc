"""How the assistant reaches the relay.

HttpRelayClient posts to a running relay endpoint; LocalRelayClient
calls a RelayService in the same process. Both raise RelayError with
the relay's ``error`` message on failure.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from storysmith.api.schemas import RelayRequest, Suggestion
from storysmith.constants import OperationMode
from storysmith.relay.service import RelayService
from storysmith.resilience.errors import RelayError, UpstreamError

logger = logging.getLogger(__name__)


class RelayClient(Protocol):
    async def invoke(
        self,
        *,
        user_story: str,
        llm_model: str,
        operation_mode: OperationMode,
        suggestions: Sequence[Suggestion] | None = None,
    ) -> dict[str, Any]: ...


def build_relay_body(
    user_story: str,
    llm_model: str,
    operation_mode: OperationMode,
    suggestions: Sequence[Suggestion] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "userStory": user_story,
        "llmModel": llm_model,
        "operationMode": operation_mode.value,
    }
    if suggestions:
        body["suggestions"] = [s.to_wire() for s in suggestions]
    return body


class HttpRelayClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        url: str,
        api_key: str = "",
        timeout: float = 60.0,
    ) -> None:
        self._http = http
        self._url = url
        self._api_key = api_key
        self._timeout = timeout

    async def invoke(
        self,
        *,
        user_story: str,
        llm_model: str,
        operation_mode: OperationMode,
        suggestions: Sequence[Suggestion] | None = None,
    ) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        body = build_relay_body(
            user_story, llm_model, operation_mode, suggestions
        )
        try:
            response = await self._http.post(
                self._url,
                json=body,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(
                "Assistant service timed out.", status_code=504
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Assistant service unreachable: {exc}"
            ) from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = (
                data.get("error")
                if isinstance(data, dict) and data.get("error")
                else response.reason_phrase or "Assistant request failed."
            )
            logger.info(
                "event=relay_call_failed status=%d mode=%s",
                response.status_code,
                operation_mode,
            )
            raise RelayError(str(message), status_code=response.status_code)

        if not isinstance(data, dict):
            raise UpstreamError("Assistant service returned a non-JSON reply.")
        return data


class LocalRelayClient:
    """Runs relay operations in-process, without an HTTP hop."""

    def __init__(self, service: RelayService) -> None:
        self._service = service

    async def invoke(
        self,
        *,
        user_story: str,
        llm_model: str,
        operation_mode: OperationMode,
        suggestions: Sequence[Suggestion] | None = None,
    ) -> dict[str, Any]:
        request = RelayRequest(
            user_story=user_story,
            llm_model=llm_model,
            operation_mode=operation_mode,
            suggestions=list(suggestions or []),
        )
        return await self._service.execute(request)
