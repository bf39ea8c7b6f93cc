"""Relay error taxonomy and error classification.

Every relay failure is one of four kinds, each carrying the HTTP
status the endpoint reports:

- RelayValidationError — bad input, unsupported mode or model (400)
- RelayConfigurationError — missing vendor credential (500)
- UpstreamError — vendor returned non-2xx or was unreachable
  (vendor status, 502 for transport failures, 504 for timeouts)
- MalformedUpstreamOutputError — vendor broke the JSON-mode
  contract (502)

classify_error() buckets any exception for structured logging
(which errors are transient vs permanent).
"""

from __future__ import annotations

import asyncio
from enum import Enum


class RelayError(Exception):
    """Base class for all relay failures reported to the caller."""

    status_code: int = 500

    def __init__(
        self, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message}


class RelayValidationError(RelayError):
    status_code = 400


class RelayConfigurationError(RelayError):
    status_code = 500


class UpstreamError(RelayError):
    """Vendor failure; status_code mirrors the vendor's response."""

    status_code = 502


class MalformedUpstreamOutputError(RelayError):
    """Vendor output did not match the contract it was asked for."""

    status_code = 502

    def __init__(self, message: str, raw_output: str = "") -> None:
        super().__init__(message)
        self.raw_output = raw_output


class OperationInFlightError(Exception):
    """An assistant operation is already running for this mode."""

    def __init__(self, key: str) -> None:
        super().__init__(f"operation already in flight: {key}")
        self.key = key


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, network errors
    SERVER = "server"  # 500, 502, 503
    TIMEOUT = "timeout"  # deadline exceeded
    CLIENT = "client"  # 400, 401, 403
    UNKNOWN = "unknown"  # unclassified


def classify_error(error: Exception) -> ErrorClass:
    """Classify an error to determine handling strategy.

    Checks structured attributes first (status_code), falls back
    to string matching for untyped exceptions.
    """
    # 1. Structured status_code attribute (RelayError, httpx)
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if status_code == 504:
            return ErrorClass.TIMEOUT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    # 2. Timeout types
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return ErrorClass.TIMEOUT

    # 3. Fall back to string matching for untyped exceptions
    msg = str(error).lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "429" in msg or "rate limit" in msg or "rate_limit" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "econnrefused" in msg or "connection" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("400", "401", "403", "404")):
        return ErrorClass.CLIENT

    return ErrorClass.UNKNOWN


_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.SERVER,
    ErrorClass.TIMEOUT,
})


def is_retryable(error: Exception) -> bool:
    """Return True if the error category would tolerate a manual retry.

    The relay itself never retries; the assistant uses this to word
    its failure notification.
    """
    return classify_error(error) in _RETRYABLE
