"""Run blocking work items concurrently on worker threads.

URL fetches and per-source LLM checks are blocking calls; fanning them out
through anyio worker threads keeps results in input order while the slow
parts overlap.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

import anyio
import anyio.to_thread

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_MAX_WORKERS = 8


def run_parallel(
    func: Callable[[T], R],
    items: Sequence[T],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[R]:
    """Apply `func` to every item concurrently and return results in order.

    The first exception raised by any call propagates once the remaining
    calls are cancelled or finished.
    """
    if not items:
        return []
    if len(items) == 1:
        return [func(items[0])]

    results: list[R | None] = [None] * len(items)
    limiter = anyio.CapacityLimiter(max(1, max_workers))

    async def _one(i: int, item: T) -> None:
        results[i] = await anyio.to_thread.run_sync(func, item, limiter=limiter)

    async def _all() -> None:
        async with anyio.create_task_group() as tg:
            for i, item in enumerate(items):
                tg.start_soon(_one, i, item)

    try:
        anyio.run(_all)
    except ExceptionGroup as group:
        first: BaseException = group
        while isinstance(first, BaseExceptionGroup):
            first = first.exceptions[0]
        raise first from None
    return results  # type: ignore[return-value]
