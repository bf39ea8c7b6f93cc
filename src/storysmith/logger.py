"""Structured JSON logger for relay request and error tracking."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from storysmith.constants import ERROR_TRUNCATION_CHARS
from storysmith.logging_config import LOG_DATEFMT, LOG_FORMAT

__all__ = ["RelayLogger", "LOG_FORMAT", "LOG_DATEFMT"]


class RelayLogger:
    """Structured JSON logger with request_id correlation."""

    def __init__(self, log_dir: Path, level: str = "INFO") -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger("storysmith.relay.audit")
        self._logger.setLevel(getattr(logging, level.upper()))

        if not self._logger.handlers:
            handler = logging.FileHandler(log_dir / "relay.log")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

    def log_request(
        self,
        request_id: str,
        operation_mode: str,
        model: str,
        vendor: str,
        story_chars: int,
        status_code: int,
        duration_ms: float,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "request",
                "timestamp": datetime.now(UTC).isoformat(),
                "request_id": request_id,
                "operation_mode": operation_mode,
                "model": model,
                "vendor": vendor,
                "story_chars": story_chars,
                "status_code": status_code,
                "duration_ms": duration_ms,
            })
        )

    def log_error(
        self,
        request_id: str,
        component: str,
        error: str,
        error_class: str,
        status_code: int,
    ) -> None:
        self._logger.error(
            json.dumps({
                "type": "error",
                "timestamp": datetime.now(UTC).isoformat(),
                "request_id": request_id,
                "component": component,
                "error": error[:ERROR_TRUNCATION_CHARS],
                "error_class": error_class,
                "status_code": status_code,
            })
        )
