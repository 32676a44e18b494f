from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import httpx


class HealthPolicy(str, Enum):
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class TargetConfig:
    base_url: str = "http://localhost:8001"
    endpoint: str = "/v1/images/generations"
    timeout_sec: float = 30.0
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return self.base_url.rstrip("/") + self.endpoint


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    prompt: str = "고양이와 강아지"
    n: int = 1
    size: str = "1024x1024"
    response_format: str = "b64_json"
    num_inference_steps: int = 8
    cfg_scale: float = 1.0
    seed: int = -1  # -1 lets the server pick a random seed

    def to_payload(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "n": self.n,
            "size": self.size,
            "response_format": self.response_format,
            "num_inference_steps": self.num_inference_steps,
            "cfg_scale": self.cfg_scale,
            "seed": self.seed,
        }


@dataclass(frozen=True, slots=True)
class SweepConfig:
    target: TargetConfig = field(default_factory=TargetConfig)
    request: GenerationRequest = field(default_factory=GenerationRequest)
    max_concurrency: int = 10
    requests_per_level: int = 1
    cooldown_sec: float = 2.0
    barrier_grace_sec: float = 0.5
    output_dir: Path = Path("results")
    health_policy: HealthPolicy = HealthPolicy.WARN
    run_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def run_dir(self) -> Path:
        return self.output_dir / (self.run_id or self.created_at.strftime("%Y%m%d_%H%M%S"))

    def level_dir(self, concurrency: int) -> Path:
        return self.run_dir / f"level_{concurrency:02d}"

    def validate(self) -> None:
        if self.max_concurrency < 1:
            msg = f"max_concurrency must be >= 1, got {self.max_concurrency}"
            raise ValueError(msg)
        if self.requests_per_level < 1:
            msg = f"requests_per_level must be >= 1, got {self.requests_per_level}"
            raise ValueError(msg)
        if self.target.timeout_sec <= 0:
            msg = f"timeout must be > 0, got {self.target.timeout_sec}"
            raise ValueError(msg)
        if self.cooldown_sec < 0:
            msg = f"cooldown must be >= 0, got {self.cooldown_sec}"
            raise ValueError(msg)
        try:
            httpx.URL(self.target.url)
        except (httpx.InvalidURL, ValueError) as exc:
            msg = f"Invalid base URL {self.target.base_url!r}: {exc}"
            raise ValueError(msg) from exc

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "run_id": self.run_id or "",
            "created_at": self.created_at.isoformat(),
            "max_concurrency": self.max_concurrency,
            "requests_per_level": self.requests_per_level,
            "cooldown_sec": self.cooldown_sec,
            "barrier_grace_sec": self.barrier_grace_sec,
            "output_dir": str(self.output_dir),
            "health_policy": self.health_policy.value,
            "target": {
                "url": self.target.url,
                "timeout_sec": self.target.timeout_sec,
                "headers": dict(self.target.headers),
            },
            "request": self.request.to_payload(),
        }
