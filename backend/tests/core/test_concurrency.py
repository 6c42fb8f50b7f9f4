"""
Tests for the bounded all-settled gather helper.
"""

from __future__ import annotations

import asyncio

import pytest

from vulnsweep.core.concurrency import gather_bounded


@pytest.mark.asyncio
async def test_results_keep_input_order_and_drop_failures() -> None:
    async def worker(value: int) -> int:
        await asyncio.sleep(0.001 * (5 - value))
        if value == 2:
            raise ValueError("bad item")
        return value * 10

    settled = await gather_bounded([1, 2, 3, 4], worker, limit=2)

    assert settled == [(1, 10), (3, 30), (4, 40)]


@pytest.mark.asyncio
async def test_in_flight_calls_never_exceed_limit() -> None:
    in_flight = 0
    peak = 0

    async def worker(value: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.005)
        in_flight -= 1
        return value

    settled = await gather_bounded(range(20), worker, limit=4)

    assert len(settled) == 20
    assert peak == 4


@pytest.mark.asyncio
async def test_empty_input_returns_empty_list() -> None:
    async def worker(value: int) -> int:
        return value

    assert await gather_bounded([], worker, limit=3) == []


@pytest.mark.asyncio
async def test_limit_must_be_positive() -> None:
    async def worker(value: int) -> int:
        return value

    with pytest.raises(ValueError):
        await gather_bounded([1], worker, limit=0)
