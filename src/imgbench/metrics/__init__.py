from __future__ import annotations

from imgbench.metrics.aggregator import aggregate_level
from imgbench.metrics.models import LevelStatistics, OutcomeStatus, RequestOutcome, synthetic_failure

__all__ = ["LevelStatistics", "OutcomeStatus", "RequestOutcome", "aggregate_level", "synthetic_failure"]
