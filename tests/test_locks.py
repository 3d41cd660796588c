"""Tests for keyed mutual exclusion."""

import asyncio
from typing import List

import pytest

from mdx_localize.locks import KeyedLock


@pytest.mark.asyncio
async def test_same_key_is_serialized() -> None:
    gate = KeyedLock()
    active = 0
    peak = 0
    order: List[int] = []

    async def work(index: int) -> None:
        nonlocal active, peak
        async with gate.hold("cat"):
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            order.append(index)
            active -= 1

    await asyncio.gather(*(work(i) for i in range(10)))
    assert peak == 1
    assert sorted(order) == list(range(10))


@pytest.mark.asyncio
async def test_different_keys_do_not_block_each_other() -> None:
    gate = KeyedLock()
    first_inside = asyncio.Event()
    second_inside = asyncio.Event()

    async def first() -> None:
        async with gate.hold("cat"):
            first_inside.set()
            await second_inside.wait()

    async def second() -> None:
        async with gate.hold("dog"):
            await first_inside.wait()
            second_inside.set()

    await asyncio.wait_for(asyncio.gather(first(), second()), timeout=2)


@pytest.mark.asyncio
async def test_with_lock_returns_result() -> None:
    gate = KeyedLock()

    async def compute() -> str:
        assert gate.active_keys() == ["cat"]
        return "done"

    assert await gate.with_lock("cat", compute) == "done"
    assert gate.active_keys() == []


@pytest.mark.asyncio
async def test_lock_released_on_exception() -> None:
    gate = KeyedLock()

    async def boom() -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await gate.with_lock("cat", boom)

    assert gate.active_keys() == []
    assert await asyncio.wait_for(_acquire(gate), timeout=1)


async def _acquire(gate: KeyedLock) -> bool:
    async with gate.hold("cat"):
        return True


@pytest.mark.asyncio
async def test_lock_released_on_cancellation() -> None:
    gate = KeyedLock()
    entered = asyncio.Event()

    async def holder() -> None:
        async with gate.hold("cat"):
            entered.set()
            await asyncio.sleep(60)

    task = asyncio.create_task(holder())
    await entered.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert gate.active_keys() == []
    assert await asyncio.wait_for(_acquire(gate), timeout=1)


@pytest.mark.asyncio
async def test_keys_are_dropped_when_idle() -> None:
    gate = KeyedLock()
    release = asyncio.Event()
    entered = asyncio.Event()

    async def holder() -> None:
        async with gate.hold("cat"):
            entered.set()
            await release.wait()

    task = asyncio.create_task(holder())
    await entered.wait()
    assert gate.active_keys() == ["cat"]
    release.set()
    await task
    assert gate.active_keys() == []
