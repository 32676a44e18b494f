from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable

import httpx

from imgbench.config import SweepConfig
from imgbench.loadgen.barrier import StartBarrier
from imgbench.loadgen.client import send_generation
from imgbench.metrics import LevelStatistics, RequestOutcome, aggregate_level, synthetic_failure
from imgbench.report import SweepReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[LevelStatistics, int], Awaitable[None]]


def new_client(max_connections: int | None = None) -> httpx.AsyncClient:
    limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=0)
    return httpx.AsyncClient(limits=limits)


async def run_level(
    client: httpx.AsyncClient,
    config: SweepConfig,
    concurrency: int,
    artifact_dir: Path | None = None,
) -> LevelStatistics:
    barrier = StartBarrier(concurrency)
    payload = config.request.to_payload()
    slots: dict[int, RequestOutcome] = {}

    async def lane(lane_id: int) -> None:
        await barrier.wait()
        for round_idx in range(config.requests_per_level):
            request_id = lane_id + round_idx * concurrency
            slots[request_id] = await send_generation(
                client,
                config.target,
                payload,
                concurrency,
                request_id,
                artifact_dir,
            )

    tasks = [asyncio.create_task(lane(i)) for i in range(1, concurrency + 1)]
    if not await barrier.wait_parked(config.barrier_grace_sec):
        logger.debug("Only %d/%d workers parked before release", barrier.parked, concurrency)
    released_at = barrier.release()
    results = await asyncio.gather(*tasks, return_exceptions=True)
    completed_at = time.perf_counter()

    for lane_id, result in enumerate(results, start=1):
        if isinstance(result, BaseException):
            logger.error("Worker %d of level %d crashed: %r", lane_id, concurrency, result)

    expected = concurrency * config.requests_per_level
    outcomes: list[RequestOutcome] = []
    for request_id in range(1, expected + 1):
        outcome = slots.get(request_id)
        if outcome is None:
            lane_id = (request_id - 1) % concurrency + 1
            error = results[lane_id - 1]
            detail = f"worker error: {type(error).__name__}" if isinstance(error, BaseException) else "no result"
            outcome = synthetic_failure(request_id, completed_at - released_at, detail)
        outcomes.append(outcome)
    return aggregate_level(concurrency, outcomes, released_at, completed_at)


async def run_sweep(
    config: SweepConfig,
    report: SweepReport | None = None,
    client: httpx.AsyncClient | None = None,
    progress: ProgressCallback | None = None,
) -> SweepReport:
    config.validate()
    if report is None:
        report = SweepReport(config.run_dir)
    if client is None:
        async with new_client() as owned:
            await _sweep_levels(owned, config, report, progress)
    else:
        await _sweep_levels(client, config, report, progress)
    return report


async def _sweep_levels(
    client: httpx.AsyncClient,
    config: SweepConfig,
    report: SweepReport,
    progress: ProgressCallback | None,
) -> None:
    for concurrency in range(1, config.max_concurrency + 1):
        logger.info(
            "Test %d/%d: %d concurrent client(s), %d request(s)",
            concurrency,
            config.max_concurrency,
            concurrency,
            concurrency * config.requests_per_level,
        )
        stats = await run_level(client, config, concurrency, config.level_dir(concurrency))
        report.append(stats)
        if progress:
            await progress(stats, config.max_concurrency)
        if concurrency < config.max_concurrency and config.cooldown_sec > 0:
            logger.info("Waiting %.1f seconds before next test...", config.cooldown_sec)
            await asyncio.sleep(config.cooldown_sec)
