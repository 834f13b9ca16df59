"""Bounded-concurrency fan-out over a list of items."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def map_limited(
    items: Sequence[T],
    limit: int,
    fn: Callable[[T], Awaitable[R]],
) -> list[R]:
    """
    Run fn over items with at most `limit` calls in flight.

    Results keep input order. fn is expected to handle its own failures
    (typically by awaiting through bounded()).
    """
    sem = asyncio.Semaphore(max(1, int(limit)))

    async def _run(item: T) -> R:
        async with sem:
            return await fn(item)

    return list(await asyncio.gather(*(_run(item) for item in items)))
