"""
privaccess_sdk.aggregation

Concurrent fan-out over a set of entities, collected into one keyed map.

Responsibilities:
- Run one worker per entity (optionally bounded) and gather the results by key.
- Report the first failure, by completion order, only after every worker finished.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Awaitable, Callable, Hashable, Iterable
from typing import Any, TypeVar

from privaccess_sdk.observability.logging import get_logger

E = TypeVar("E")
K = TypeVar("K", bound=Hashable)
R = TypeVar("R")

log = get_logger(__name__)


async def _each(entities: Iterable[E] | AsyncIterable[E]):
    if isinstance(entities, AsyncIterable):
        async for e in entities:
            yield e
    else:
        for e in entities:
            yield e


async def aggregate(
    entities: Iterable[E] | AsyncIterable[E],
    compute: Callable[[E], Awaitable[R]],
    *,
    key: Callable[[E], K] | None = None,
    max_concurrency: int | None = None,
) -> dict[Any, R]:
    """
    Returns `{key(entity): await compute(entity)}` for every entity, or raises the first
    error any worker hit. Workers are not cancelled when one fails; their results are
    discarded instead. `max_concurrency=None` runs every worker at once.
    """
    results: dict[Any, R] = {}
    first_error: list[BaseException] = []
    lock = asyncio.Lock()
    gate = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def worker(entity: E) -> None:
        try:
            if gate is None:
                value = await compute(entity)
            else:
                async with gate:
                    value = await compute(entity)
            k = key(entity) if key is not None else entity
        except Exception as e:
            async with lock:
                if not first_error:
                    first_error.append(e)
            return
        async with lock:
            if not first_error:
                results[k] = value

    tasks: list[asyncio.Task[None]] = []
    try:
        async for entity in _each(entities):
            tasks.append(asyncio.create_task(worker(entity)))
    finally:
        # Even if the entity source fails, every spawned worker is awaited.
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    if first_error:
        log.warning("aggregate_failed", workers=len(tasks), error=str(first_error[0]))
        raise first_error[0]
    return results


# --- Module Notes -----------------------------------------------------------
# Result ordering is unspecified; duplicate keys keep whichever worker finished last.
