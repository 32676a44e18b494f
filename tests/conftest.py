from __future__ import annotations

from pathlib import Path

import pytest

from imgbench.config import SweepConfig, TargetConfig


@pytest.fixture
def sweep_config(tmp_path: Path) -> SweepConfig:
    return SweepConfig(
        target=TargetConfig(base_url="http://bench.test", timeout_sec=5.0),
        max_concurrency=3,
        cooldown_sec=0.0,
        barrier_grace_sec=0.5,
        output_dir=tmp_path / "results",
        run_id="test-run",
    )
