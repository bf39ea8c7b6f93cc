"""Tests for VendorClient over httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from storysmith.config import Settings
from storysmith.constants import VendorFamily
from storysmith.relay.client import VendorClient
from storysmith.relay.vendors import VENDORS
from storysmith.resilience.errors import (
    MalformedUpstreamOutputError,
    UpstreamError,
)
from tests.conftest import StubVendor, gemini_reply, openai_reply

GEMINI = VENDORS[VendorFamily.GEMINI]
OPENAI = VENDORS[VendorFamily.OPENAI]


def _client(vendor: StubVendor) -> VendorClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(vendor))
    return VendorClient(http, Settings())


async def test_gemini_call_sends_key_as_query_param() -> None:
    vendor = StubVendor(lambda _req: gemini_reply("improved story"))
    text = await _client(vendor).complete(
        GEMINI, "g-key", "gemini-2.5-flash", "prompt", json_mode=False
    )
    assert text == "improved story"
    [request] = vendor.requests
    assert request.method == "POST"
    assert request.url.params["key"] == "g-key"
    assert request.url.path.endswith(
        "/models/gemini-2.5-flash:generateContent"
    )


async def test_openai_call_sends_bearer_token() -> None:
    vendor = StubVendor(lambda _req: openai_reply("{}"))
    await _client(vendor).complete(
        OPENAI, "sk-test", "gpt-4o", "prompt", json_mode=True
    )
    [request] = vendor.requests
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert vendor.last_body()["response_format"] == {
        "type": "json_object"
    }


async def test_vendor_error_status_and_message_pass_through() -> None:
    vendor = StubVendor(
        lambda _req: httpx.Response(
            429, json={"error": {"message": "Quota exceeded"}}
        )
    )
    with pytest.raises(UpstreamError) as exc_info:
        await _client(vendor).complete(
            OPENAI, "sk", "gpt-4o", "prompt", json_mode=False
        )
    assert exc_info.value.status_code == 429
    assert exc_info.value.message == "LLM API error: Quota exceeded"


async def test_vendor_error_without_body_uses_reason_phrase() -> None:
    vendor = StubVendor(lambda _req: httpx.Response(503, text="busy"))
    with pytest.raises(UpstreamError) as exc_info:
        await _client(vendor).complete(
            GEMINI, "g", "gemini-2.5-flash", "prompt", json_mode=False
        )
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "LLM API error: Service Unavailable"


async def test_transport_failure_is_502() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        await _client(StubVendor(_refuse)).complete(
            GEMINI, "g", "gemini-2.5-flash", "prompt", json_mode=False
        )
    assert exc_info.value.status_code == 502
    assert "unreachable" in exc_info.value.message


async def test_timeout_is_504() -> None:
    def _slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        await _client(StubVendor(_slow)).complete(
            GEMINI, "g", "gemini-2.5-flash", "prompt", json_mode=False
        )
    assert exc_info.value.status_code == 504


async def test_non_json_envelope_is_malformed() -> None:
    vendor = StubVendor(lambda _req: httpx.Response(200, text="<html>"))
    with pytest.raises(MalformedUpstreamOutputError):
        await _client(vendor).complete(
            GEMINI, "g", "gemini-2.5-flash", "prompt", json_mode=False
        )


async def test_list_envelope_is_malformed() -> None:
    vendor = StubVendor(lambda _req: httpx.Response(200, json=[1, 2]))
    with pytest.raises(MalformedUpstreamOutputError):
        await _client(vendor).complete(
            OPENAI, "sk", "gpt-4o", "prompt", json_mode=False
        )
