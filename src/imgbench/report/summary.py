from __future__ import annotations

from pathlib import Path

import pandas as pd

from imgbench.metrics import LevelStatistics

COLUMNS = ("Concurrent", "Success", "Failed", "Timeout", "Saved", "Total(s)", "Avg(s)")
_ROW = "{:<12} {:<10} {:<10} {:<10} {:<8} {:<12} {:<12}"
_RULE = "=" * 46


class SweepReport:
    """Ordered per-level statistics of one sweep, rendered once at the end."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self._levels: list[LevelStatistics] = []

    @property
    def levels(self) -> tuple[LevelStatistics, ...]:
        return tuple(self._levels)

    def append(self, stats: LevelStatistics) -> None:
        if self._levels and stats.concurrency <= self._levels[-1].concurrency:
            msg = (
                f"Level {stats.concurrency} appended after level "
                f"{self._levels[-1].concurrency}; levels must increase"
            )
            raise ValueError(msg)
        self._levels.append(stats)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "concurrency": s.concurrency,
                    "requests": s.requests,
                    "success": s.success_count,
                    "failed": s.failed_count,
                    "timeout": s.timeout_count,
                    "artifacts_saved": s.artifacts_saved,
                    "total_sec": s.total_duration_sec,
                    "avg_sec": s.avg_response_sec,
                    "p50_sec": s.p50_response_sec,
                    "p95_sec": s.p95_response_sec,
                    "requests_per_sec": s.requests_per_sec,
                }
                for s in self._levels
            ],
            columns=[
                "concurrency",
                "requests",
                "success",
                "failed",
                "timeout",
                "artifacts_saved",
                "total_sec",
                "avg_sec",
                "p50_sec",
                "p95_sec",
                "requests_per_sec",
            ],
        )

    def write_csv(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(path, index=False)
        return path

    def render(self) -> str:
        lines = ["", _RULE, "  LOAD TEST SUMMARY", _RULE, ""]
        lines.append(_ROW.format(*COLUMNS))
        lines.append(_ROW.format(*("-" * len(c) for c in COLUMNS)))
        if not self._levels:
            lines.append("(no levels were run)")
        for s in self._levels:
            lines.append(
                _ROW.format(
                    s.concurrency,
                    s.success_count,
                    s.failed_count,
                    s.timeout_count,
                    s.artifacts_saved,
                    f"{s.total_duration_sec:.3f}",
                    f"{s.avg_response_sec:.3f}",
                )
            )
        lines.append("")
        lines.append(f"Images saved under: {self.output_dir}")
        return "\n".join(lines)


def render_level(stats: LevelStatistics) -> str:
    lines = ["", "  Results:"]
    lines.extend(f"    {o.describe()}" for o in stats.outcomes)
    lines.extend(
        [
            "",
            "  Summary:",
            f"    - Concurrent: {stats.concurrency}",
            f"    - Success: {stats.success_count}/{stats.requests}",
            f"    - Failed: {stats.failed_count}",
            f"    - Timeout: {stats.timeout_count}",
            f"    - Images saved: {stats.artifacts_saved}",
            f"    - Total Duration: {stats.total_duration_sec:.3f}s",
        ]
    )
    if stats.success_count:
        lines.append(f"    - Avg Response Time: {stats.avg_response_sec:.3f}s")
        lines.append(f"    - p95 Response Time: {stats.p95_response_sec:.3f}s")
    return "\n".join(lines)
