"""Tests for InFlightGuard."""

from __future__ import annotations

import asyncio

import pytest

from storysmith.resilience.errors import OperationInFlightError
from storysmith.resilience.inflight import InFlightGuard


async def test_rejects_concurrent_call_for_same_key() -> None:
    """Second call with a running key fails fast, first completes."""
    guard = InFlightGuard()
    release = asyncio.Event()
    call_count = 0

    async def _slow_op() -> str:
        nonlocal call_count
        call_count += 1
        await release.wait()
        return "result"

    first = asyncio.create_task(guard.execute("analyze", _slow_op))
    await asyncio.sleep(0)
    assert guard.is_active("analyze")

    with pytest.raises(OperationInFlightError) as exc_info:
        await guard.execute("analyze", _slow_op)
    assert exc_info.value.key == "analyze"

    release.set()
    assert await first == "result"
    assert call_count == 1


async def test_independent_keys_run_concurrently() -> None:
    guard = InFlightGuard()
    release = asyncio.Event()

    async def _op() -> str:
        await release.wait()
        return "ok"

    a = asyncio.create_task(guard.execute("analyze", _op))
    b = asyncio.create_task(guard.execute("review_and_improve", _op))
    await asyncio.sleep(0)
    assert guard.active_keys == ["analyze", "review_and_improve"]

    release.set()
    assert await asyncio.gather(a, b) == ["ok", "ok"]
    assert guard.active_keys == []


async def test_key_released_after_error() -> None:
    """A failed operation does not leave its key locked."""
    guard = InFlightGuard()

    async def _failing_op() -> str:
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await guard.execute("analyze", _failing_op)
    assert not guard.is_active("analyze")

    async def _ok() -> str:
        return "again"

    assert await guard.execute("analyze", _ok) == "again"


async def test_sequential_calls_allowed() -> None:
    guard = InFlightGuard()
    results = []

    async def _op() -> int:
        results.append(len(results))
        return len(results)

    assert await guard.execute("k", _op) == 1
    assert await guard.execute("k", _op) == 2
