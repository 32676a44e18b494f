from __future__ import annotations

from typing import Iterable

import numpy as np

from imgbench.metrics.models import LevelStatistics, OutcomeStatus, RequestOutcome


def aggregate_level(
    concurrency: int,
    outcomes: Iterable[RequestOutcome],
    released_at: float,
    completed_at: float,
) -> LevelStatistics:
    ordered = tuple(sorted(outcomes, key=lambda o: o.request_id))
    success = [o for o in ordered if o.status is OutcomeStatus.SUCCESS]
    failed_count = sum(1 for o in ordered if o.status is OutcomeStatus.FAILED)
    timeout_count = sum(1 for o in ordered if o.status is OutcomeStatus.TIMEOUT)
    saved = sum(1 for o in success if o.artifact_path is not None)

    durations = [o.duration_sec for o in success]
    if durations:
        avg = float(np.mean(durations))
        p50 = float(np.percentile(durations, 50))
        p95 = float(np.percentile(durations, 95))
    else:
        avg = p50 = p95 = 0.0

    total = max(0.0, completed_at - released_at)
    rps = len(success) / total if total > 0 else 0.0
    return LevelStatistics(
        concurrency=concurrency,
        requests=len(ordered),
        success_count=len(success),
        failed_count=failed_count,
        timeout_count=timeout_count,
        artifacts_saved=saved,
        total_duration_sec=total,
        avg_response_sec=avg,
        p50_response_sec=p50,
        p95_response_sec=p95,
        requests_per_sec=rps,
        released_at=released_at,
        completed_at=completed_at,
        outcomes=ordered,
    )
