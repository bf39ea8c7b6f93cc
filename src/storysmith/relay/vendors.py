"""Upstream LLM vendor table.

Each VendorFamily has one VendorSpec describing how to reach it:
endpoint URL, where the credential goes (bearer header vs. URL query),
the request envelope, and how to pull the raw text out of the reply.
Model names map to a family through MODEL_PREFIXES; adding a vendor
means adding a row here, not another branch in the relay.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from storysmith.config import Settings
from storysmith.constants import MODEL_PREFIXES, VendorFamily
from storysmith.resilience.errors import (
    MalformedUpstreamOutputError,
    RelayConfigurationError,
)


@dataclass(frozen=True)
class VendorRequest:
    """Fully-resolved outbound call (URL, headers, params, JSON body)."""

    url: str
    headers: dict[str, str]
    params: dict[str, str]
    body: dict[str, Any]


@dataclass(frozen=True)
class VendorSpec:
    family: VendorFamily
    key_setting: str
    key_env_var: str
    build_request: Callable[
        [Settings, str, str, str, bool], VendorRequest
    ]
    extract_text: Callable[[dict[str, Any]], str]
    extract_error: Callable[[dict[str, Any]], str | None]


# ── OpenAI chat-completions ─────────────────────────────


def _openai_request(
    settings: Settings,
    api_key: str,
    model: str,
    prompt: str,
    json_mode: bool,
) -> VendorRequest:
    body: dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": settings.llm_temperature,
    }
    if json_mode:
        body["response_format"] = {"type": "json_object"}
    return VendorRequest(
        url=f"{settings.openai_base_url}/chat/completions",
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        },
        params={},
        body=body,
    )


def _openai_text(payload: dict[str, Any]) -> str:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedUpstreamOutputError(
            "LLM response did not contain a completion."
        ) from exc
    return str(content or "")


def _openai_error(payload: dict[str, Any]) -> str | None:
    err = payload.get("error")
    if isinstance(err, dict):
        return err.get("message")  # type: ignore[no-any-return]
    return None


# ── Gemini generateContent ──────────────────────────────


def _gemini_request(
    settings: Settings,
    api_key: str,
    model: str,
    prompt: str,
    json_mode: bool,
) -> VendorRequest:
    generation_config: dict[str, Any] = {
        "temperature": settings.llm_temperature,
    }
    if json_mode:
        generation_config["responseMimeType"] = "application/json"
    return VendorRequest(
        url=(
            f"{settings.gemini_base_url}/models/{model}:generateContent"
        ),
        headers={"Content-Type": "application/json"},
        params={"key": api_key},
        body={
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        },
    )


def _gemini_text(payload: dict[str, Any]) -> str:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedUpstreamOutputError(
            "LLM response did not contain a candidate."
        ) from exc
    return "".join(
        str(p.get("text", "")) for p in parts if isinstance(p, dict)
    )


def _gemini_error(payload: dict[str, Any]) -> str | None:
    err = payload.get("error")
    if isinstance(err, dict):
        return err.get("message")  # type: ignore[no-any-return]
    return None


VENDORS: dict[VendorFamily, VendorSpec] = {
    VendorFamily.OPENAI: VendorSpec(
        family=VendorFamily.OPENAI,
        key_setting="openai_api_key",
        key_env_var="OPENAI_API_KEY",
        build_request=_openai_request,
        extract_text=_openai_text,
        extract_error=_openai_error,
    ),
    VendorFamily.GEMINI: VendorSpec(
        family=VendorFamily.GEMINI,
        key_setting="gemini_api_key",
        key_env_var="GEMINI_API_KEY",
        build_request=_gemini_request,
        extract_text=_gemini_text,
        extract_error=_gemini_error,
    ),
}


def resolve_vendor(model: str) -> VendorSpec | None:
    """Return the vendor serving this model name, or None if unsupported."""
    name = model.strip().lower()
    for prefix, family in MODEL_PREFIXES:
        if name.startswith(prefix):
            return VENDORS[family]
    return None


def vendor_credential(spec: VendorSpec, settings: Settings) -> str:
    """Read the vendor's API key from settings at request time."""
    api_key: str = getattr(settings, spec.key_setting)
    if not api_key:
        raise RelayConfigurationError(
            f"{spec.key_env_var} is not configured on the server."
        )
    return api_key
