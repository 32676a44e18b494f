from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpg"),
    (b"RIFF", "webp"),
)


def extract_b64_image(body: Any) -> str | None:
    """Return ``data[0].b64_json`` from a generation response, if present."""
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    if not isinstance(first, dict):
        return None
    value = first.get("b64_json")
    if isinstance(value, str) and value:
        return value
    return None


def image_extension(payload: bytes) -> str:
    for signature, ext in _SIGNATURES:
        if payload.startswith(signature):
            return ext
    return "png"


def artifact_name(level: int, request_id: int, ext: str = "png") -> str:
    return f"c{level:03d}_r{request_id:04d}.{ext}"


def save_artifact(encoded: str, directory: Path, level: int, request_id: int) -> Path | None:
    try:
        payload = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        logger.warning("Request %d: could not decode image payload: %s", request_id, exc)
        return None
    if not payload:
        logger.warning("Request %d: image payload is empty", request_id)
        return None
    path = directory / artifact_name(level, request_id, image_extension(payload))
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
    except OSError as exc:
        logger.warning("Request %d: could not write %s: %s", request_id, path, exc)
        return None
    return path
