from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

HEALTH_PATHS = ("/health", "/v1/models")


async def probe_server(client: httpx.AsyncClient, base_url: str, timeout_sec: float = 5.0) -> bool:
    base = base_url.rstrip("/")
    for path in HEALTH_PATHS:
        try:
            resp = await client.get(base + path, timeout=timeout_sec)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Health probe %s failed: %r", path, exc)
            continue
        if resp.status_code < 500:
            return True
    return False
