from __future__ import annotations

import asyncio
import time


class StartBarrier:
    """Parks a fixed number of workers and releases them with a single signal."""

    def __init__(self, parties: int) -> None:
        if parties < 1:
            msg = f"parties must be >= 1, got {parties}"
            raise ValueError(msg)
        self.parties = parties
        self.parked = 0
        self.released_at: float | None = None
        self._all_parked = asyncio.Event()
        self._release = asyncio.Event()

    async def wait(self) -> None:
        self.parked += 1
        if self.parked >= self.parties:
            self._all_parked.set()
        await self._release.wait()

    async def wait_parked(self, grace_sec: float) -> bool:
        try:
            await asyncio.wait_for(self._all_parked.wait(), timeout=grace_sec)
        except asyncio.TimeoutError:
            return False
        return True

    def release(self) -> float:
        if self._release.is_set():
            msg = "Barrier already released"
            raise RuntimeError(msg)
        self.released_at = time.perf_counter()
        self._release.set()
        return self.released_at
