"""
Bounded fan-out helper shared by the DNS gate and the reachability prober.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

from vulnsweep.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def gather_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[tuple[T, R]]:
    """Run *worker* over *items* with at most *limit* calls in flight.

    Results are settled individually: an item whose worker raises is logged
    and left out, so one failing or hung item never sinks its siblings.

    Args:
        items:  Inputs to process.
        worker: Coroutine function applied to each item.
        limit:  Maximum number of concurrent worker calls.

    Returns:
        ``(item, result)`` pairs for every item that completed, in input
        order.
    """
    if limit <= 0:
        raise ValueError("limit must be a positive integer.")

    semaphore = asyncio.Semaphore(limit)
    ordered: list[T] = list(items)

    async def _run(item: T) -> R:
        async with semaphore:
            return await worker(item)

    outcomes = await asyncio.gather(
        *(_run(item) for item in ordered),
        return_exceptions=True,
    )

    settled: list[tuple[T, R]] = []
    for item, outcome in zip(ordered, outcomes):
        if isinstance(outcome, BaseException):
            logger.debug(
                "Worker failed for %s: %r",
                item,
                outcome,
                extra={"action": "gather_failed", "target": str(item)},
            )
            continue
        settled.append((item, outcome))
    return settled
