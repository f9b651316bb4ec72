from __future__ import annotations

import asyncio

import pytest

from satellite.engine.locks import KeyedLock


@pytest.mark.asyncio
async def test_same_key_is_serialized_and_released():
    locks = KeyedLock()
    order: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold("42"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a-in", "a-out", "b-in", "b-out"]
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_released_when_body_raises():
    locks = KeyedLock()

    with pytest.raises(RuntimeError):
        async with locks.hold("42"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    async with locks.hold("42"):
        assert len(locks) == 1
