"""Tests for singleton logging configuration and the relay audit log."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from storysmith.logger import RelayLogger
from storysmith.logging_config import (
    _SUPPRESSED_LOGGERS,
    LOG_DATEFMT,
    LOG_FORMAT,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_flag() -> None:
    """Reset the singleton flag before each test."""
    import storysmith.logging_config as mod

    mod._configured = False


@pytest.fixture
def audit_logger():
    """Detach handlers so each RelayLogger writes to its own tmp dir."""
    lg = logging.getLogger("storysmith.relay.audit")
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    yield lg
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()


def test_setup_logging_is_idempotent() -> None:
    """Second call is a no-op."""
    with patch("storysmith.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging()
        mock_bc.assert_called_once()


def test_setup_logging_uses_shared_format() -> None:
    with patch("storysmith.logging_config.logging.basicConfig") as mock_bc:
        setup_logging("debug")
    kwargs = mock_bc.call_args.kwargs
    assert kwargs["format"] == LOG_FORMAT
    assert kwargs["datefmt"] == LOG_DATEFMT
    assert kwargs["level"] == logging.DEBUG


def test_suppressed_loggers_at_warning() -> None:
    """HTTP client loggers would echo URL-embedded vendor keys."""
    setup_logging()
    for name in _SUPPRESSED_LOGGERS:
        lg = logging.getLogger(name)
        assert lg.level == logging.WARNING, (
            f"Logger {name!r} level is {lg.level}, expected WARNING"
        )
    assert "httpx" in _SUPPRESSED_LOGGERS


def _lines(path: Path) -> list[dict[str, object]]:
    return [
        json.loads(line)
        for line in path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]


def test_relay_logger_writes_request_line(
    tmp_path: Path, audit_logger: logging.Logger
) -> None:
    audit = RelayLogger(log_dir=tmp_path / "logs")
    audit.log_request(
        request_id="abc123",
        operation_mode="analyze",
        model="gemini-2.5-flash",
        vendor="gemini",
        story_chars=42,
        status_code=200,
        duration_ms=12.5,
    )
    for handler in audit_logger.handlers:
        handler.flush()

    [entry] = _lines(tmp_path / "logs" / "relay.log")
    assert entry["type"] == "request"
    assert entry["request_id"] == "abc123"
    assert entry["vendor"] == "gemini"
    assert entry["status_code"] == 200


def test_relay_logger_truncates_error_text(
    tmp_path: Path, audit_logger: logging.Logger
) -> None:
    audit = RelayLogger(log_dir=tmp_path)
    audit.log_error(
        request_id="r1",
        component="openai",
        error="x" * 1000,
        error_class="server",
        status_code=502,
    )
    for handler in audit_logger.handlers:
        handler.flush()

    [entry] = _lines(tmp_path / "relay.log")
    assert entry["type"] == "error"
    assert len(str(entry["error"])) == 200
    assert entry["status_code"] == 502
