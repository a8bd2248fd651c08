"""
tests.test_aggregation

Concurrent fan-out semantics.

Responsibilities:
- Full success returns one entry per entity.
- A failing worker surfaces its original exception only after every worker finished.
- The concurrency bound is honored.
"""

from __future__ import annotations

import asyncio

import pytest

from privaccess_sdk.aggregation import aggregate


class Boom(Exception):
    pass


@pytest.mark.asyncio
async def test_full_success_keyed_by_entity() -> None:
    async def square(n: int) -> int:
        await asyncio.sleep(0)
        return n * n

    assert await aggregate(range(5), square) == {0: 0, 1: 1, 2: 4, 3: 9, 4: 16}


@pytest.mark.asyncio
async def test_custom_key_and_async_source() -> None:
    async def source():
        for name in ("a", "bb", "ccc"):
            yield name

    async def length(s: str) -> int:
        return len(s)

    result = await aggregate(source(), length, key=str.upper)
    assert result == {"A": 1, "BB": 2, "CCC": 3}


@pytest.mark.asyncio
async def test_partial_failure_raises_original_after_all_workers() -> None:
    finished: list[int] = []
    error = Boom("entity 2 failed")

    async def compute(n: int) -> int:
        if n == 2:
            raise error
        await asyncio.sleep(0.01)
        finished.append(n)
        return n

    with pytest.raises(Boom) as exc:
        await aggregate([0, 1, 2, 3], compute)

    assert exc.value is error
    assert sorted(finished) == [0, 1, 3]


@pytest.mark.asyncio
async def test_only_first_error_is_reported() -> None:
    async def compute(n: int) -> int:
        await asyncio.sleep(0.01 * n)
        raise Boom(f"failed {n}")

    with pytest.raises(Boom, match="failed 0"):
        await aggregate([0, 1, 2], compute)


@pytest.mark.asyncio
async def test_concurrency_bound() -> None:
    running = 0
    peak = 0

    async def compute(n: int) -> int:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return n

    result = await aggregate(range(10), compute, max_concurrency=3)
    assert len(result) == 10
    assert peak <= 3


@pytest.mark.asyncio
async def test_empty_source() -> None:
    async def compute(n: int) -> int:
        return n

    assert await aggregate([], compute) == {}


@pytest.mark.asyncio
async def test_five_entities_keyed_regardless_of_completion_order() -> None:
    completed: list[str] = []

    async def compute(name: str) -> str:
        # Later entities finish first.
        await asyncio.sleep(0.01 * (5 - len(name)))
        completed.append(name)
        return name.upper()

    names = ["a", "bb", "ccc", "dddd", "eeeee"]
    result = await aggregate(names, compute, key=len)

    assert completed == list(reversed(names))
    assert result == {1: "A", 2: "BB", 3: "CCC", 4: "DDDD", 5: "EEEEE"}


@pytest.mark.asyncio
async def test_one_failure_among_five_waits_for_the_other_four() -> None:
    finished: list[int] = []
    error = Boom("entity 3 failed")

    async def compute(n: int) -> int:
        await asyncio.sleep(0.01 * n)
        if n == 3:
            raise error
        finished.append(n)
        return n

    with pytest.raises(Boom) as exc:
        await aggregate(range(5), compute)

    assert exc.value is error
    assert finished == [0, 1, 2, 4]


@pytest.mark.asyncio
async def test_failing_key_is_reported_after_all_workers() -> None:
    finished: list[int] = []

    async def compute(n: int) -> int:
        if n:
            await asyncio.sleep(0.05)
        finished.append(n)
        return n

    def key(n: int) -> str:
        if n == 0:
            raise KeyError("no key for 0")
        return str(n)

    with pytest.raises(KeyError, match="no key for 0"):
        await aggregate([0, 1, 2], compute, key=key)

    assert sorted(finished) == [0, 1, 2]


# --- Module Notes -----------------------------------------------------------
# Workers are never cancelled on failure; `finished` proves the siblings ran to completion.
