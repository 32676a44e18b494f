from __future__ import annotations

import asyncio

import pytest

from imgbench.loadgen.barrier import StartBarrier


def test_workers_resume_only_after_release() -> None:
    async def go() -> tuple[list[float], float]:
        barrier = StartBarrier(3)
        started: list[float] = []

        async def worker() -> None:
            await barrier.wait()
            started.append(asyncio.get_running_loop().time())

        tasks = [asyncio.create_task(worker()) for _ in range(3)]
        assert await barrier.wait_parked(1.0)
        assert started == []
        assert barrier.parked == 3
        barrier.release()
        await asyncio.gather(*tasks)
        return started, barrier.released_at or 0.0

    started, released_at = asyncio.run(go())
    assert len(started) == 3
    assert max(started) - min(started) < 0.05
    assert released_at > 0


def test_grace_period_expires_when_workers_are_missing() -> None:
    async def go() -> bool:
        barrier = StartBarrier(2)
        task = asyncio.create_task(barrier.wait())
        parked = await barrier.wait_parked(0.05)
        barrier.release()
        await task
        return parked

    assert asyncio.run(go()) is False


def test_release_twice_is_an_error() -> None:
    async def go() -> None:
        barrier = StartBarrier(1)
        barrier.release()
        barrier.release()

    with pytest.raises(RuntimeError):
        asyncio.run(go())


def test_barrier_needs_a_party() -> None:
    with pytest.raises(ValueError):
        StartBarrier(0)
