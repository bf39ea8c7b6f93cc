"""User-visible notifications raised by the assistant."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...
    def info(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Routes notifications to the log when no UI is attached."""

    def success(self, message: str) -> None:
        logger.info("event=notify level=success message=%s", message)

    def info(self, message: str) -> None:
        logger.info("event=notify level=info message=%s", message)

    def error(self, message: str) -> None:
        logger.warning("event=notify level=error message=%s", message)
