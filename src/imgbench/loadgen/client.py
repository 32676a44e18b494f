from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Mapping

import httpx

from imgbench.config import TargetConfig
from imgbench.loadgen.artifacts import extract_b64_image, save_artifact
from imgbench.metrics import OutcomeStatus, RequestOutcome

logger = logging.getLogger(__name__)

ERROR_DETAIL_LIMIT = 50


def extract_error_detail(body: Any) -> str:
    detail: Any = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            detail = error.get("message")
        elif isinstance(error, str):
            detail = error
        if not detail:
            detail = body.get("detail")
    if detail is None or detail == "":
        return "unknown"
    if not isinstance(detail, str):
        detail = json.dumps(detail, ensure_ascii=False)
    return detail[:ERROR_DETAIL_LIMIT]


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


async def send_generation(
    client: httpx.AsyncClient,
    target: TargetConfig,
    payload: Mapping[str, Any],
    level: int,
    request_id: int,
    artifact_dir: Path | None,
) -> RequestOutcome:
    start = time.perf_counter()
    try:
        resp = await asyncio.wait_for(
            client.post(
                target.url,
                json=dict(payload),
                headers=dict(target.headers),
                timeout=target.timeout_sec,
            ),
            timeout=target.timeout_sec,
        )
    except (httpx.RequestError, httpx.InvalidURL, asyncio.TimeoutError) as exc:
        duration = time.perf_counter() - start
        logger.debug("Request %d: no response after %.3fs: %r", request_id, duration, exc)
        return RequestOutcome(
            request_id=request_id,
            status=OutcomeStatus.TIMEOUT,
            http_status=None,
            duration_sec=duration,
            error_detail=type(exc).__name__,
        )
    duration = time.perf_counter() - start

    body = _json_or_none(resp)
    if resp.status_code != 200:
        return RequestOutcome(
            request_id=request_id,
            status=OutcomeStatus.FAILED,
            http_status=resp.status_code,
            duration_sec=duration,
            error_detail=extract_error_detail(body),
        )

    artifact_path = None
    if artifact_dir is not None:
        encoded = extract_b64_image(body)
        if encoded is None:
            logger.warning("Request %d: response carried no b64_json image", request_id)
        else:
            artifact_path = save_artifact(encoded, artifact_dir, level, request_id)
    return RequestOutcome(
        request_id=request_id,
        status=OutcomeStatus.SUCCESS,
        http_status=resp.status_code,
        duration_sec=duration,
        artifact_path=artifact_path,
    )
