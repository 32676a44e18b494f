from __future__ import annotations

from imgbench.config.env import ENV_HELP, load_from_env
from imgbench.config.models import GenerationRequest, HealthPolicy, SweepConfig, TargetConfig

__all__ = [
    "ENV_HELP",
    "GenerationRequest",
    "HealthPolicy",
    "SweepConfig",
    "TargetConfig",
    "load_from_env",
]
