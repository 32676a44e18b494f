from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class RequestOutcome:
    request_id: int
    status: OutcomeStatus
    http_status: int | None
    duration_sec: float
    artifact_path: Path | None = None
    error_detail: str | None = None

    def describe(self) -> str:
        code = f"HTTP_{self.http_status}" if self.http_status is not None else "NO_RESPONSE"
        line = f"REQUEST_{self.request_id}|{self.status.value.upper()}|{self.duration_sec:.3f}s|{code}"
        if self.error_detail:
            line += f"|{self.error_detail}"
        return line


def synthetic_failure(request_id: int, duration_sec: float, detail: str) -> RequestOutcome:
    return RequestOutcome(
        request_id=request_id,
        status=OutcomeStatus.FAILED,
        http_status=None,
        duration_sec=duration_sec,
        error_detail=detail,
    )


@dataclass(frozen=True, slots=True)
class LevelStatistics:
    concurrency: int
    requests: int
    success_count: int
    failed_count: int
    timeout_count: int
    artifacts_saved: int
    total_duration_sec: float
    avg_response_sec: float
    p50_response_sec: float
    p95_response_sec: float
    requests_per_sec: float
    released_at: float
    completed_at: float
    outcomes: tuple[RequestOutcome, ...] = ()
