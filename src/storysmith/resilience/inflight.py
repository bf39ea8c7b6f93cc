"""In-flight operation guard.

InFlightGuard rejects a second concurrent operation for the same key.
If operation A is running for key "analyze" and operation B arrives
for the same key, B fails fast with OperationInFlightError instead of
issuing a duplicate relay call. Different keys run independently.

Single event loop only. Each assistant controller owns one guard.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from storysmith.resilience.errors import OperationInFlightError

T = TypeVar("T")


class InFlightGuard:
    """Rejects re-entry of async operations by key.

    Usage::

        guard = InFlightGuard()
        result = await guard.execute("analyze", my_async_fn)
    """

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    async def execute(
        self,
        key: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """Run operation unless one with the same key is running.

        The membership check and the add happen without an await in
        between, so two tasks on the same loop cannot both pass it.
        """
        if key in self._in_flight:
            raise OperationInFlightError(key)
        self._in_flight.add(key)
        try:
            return await operation()
        finally:
            self._in_flight.discard(key)

    def is_active(self, key: str) -> bool:
        return key in self._in_flight

    @property
    def active_keys(self) -> list[str]:
        """Return currently in-flight operation keys."""
        return sorted(self._in_flight)
