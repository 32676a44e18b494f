from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, TypeVar

from imgbench.config.models import GenerationRequest, HealthPolicy, SweepConfig, TargetConfig

T = TypeVar("T")

ENV_HELP = {
    "BASE_URL": "Base URL of the server (default: http://localhost:8001)",
    "TIMEOUT": "Request timeout in seconds (default: 30)",
    "MAX_CONCURRENT": "Maximum concurrent requests (default: 10)",
    "REQUESTS_PER_LEVEL": "Requests per client at each concurrency level (default: 1)",
    "COOLDOWN": "Seconds to wait between levels (default: 2)",
    "OUTPUT_DIR": "Directory for run results and images (default: results)",
    "HEALTH_POLICY": "warn or fail when the health check fails (default: warn)",
    "PROMPT": "Prompt sent with every request",
}


def _read(environ: Mapping[str, str], name: str, cast: Callable[[str], T], default: T) -> T:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        msg = f"Invalid value for {name}: {raw!r}"
        raise ValueError(msg) from exc


def load_from_env(environ: Mapping[str, str] | None = None) -> SweepConfig:
    env = os.environ if environ is None else environ
    defaults = SweepConfig()
    target = TargetConfig(
        base_url=_read(env, "BASE_URL", str, defaults.target.base_url),
        timeout_sec=_read(env, "TIMEOUT", float, defaults.target.timeout_sec),
    )
    request = GenerationRequest(prompt=_read(env, "PROMPT", str, defaults.request.prompt))
    return SweepConfig(
        target=target,
        request=request,
        max_concurrency=_read(env, "MAX_CONCURRENT", int, defaults.max_concurrency),
        requests_per_level=_read(env, "REQUESTS_PER_LEVEL", int, defaults.requests_per_level),
        cooldown_sec=_read(env, "COOLDOWN", float, defaults.cooldown_sec),
        output_dir=_read(env, "OUTPUT_DIR", Path, defaults.output_dir),
        health_policy=_read(env, "HEALTH_POLICY", lambda v: HealthPolicy(v.lower()), defaults.health_policy),
    )
