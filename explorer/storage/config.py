"""
Centralized storage configuration for the data bucket.

Intent:
    Single source of truth for the upload size ceiling, the presigned download
    lifetime and the server-side encryption directive, so the operations module,
    the web adapter and tests agree.

Behavior:
    - MAX_UPLOAD_BYTES is the 100 MiB contract ceiling.
    - get_max_upload_bytes() reads EXPLORER_MAX_UPLOAD_BYTES and clamps it to
      the contract; invalid or non-positive values fall back to the default.

Permissions:
    Pure configuration; no external calls or privileges required.
"""
from __future__ import annotations

import os


MAX_UPLOAD_BYTES = 100 * 1024 * 1024
DOWNLOAD_URL_TTL_SECONDS = 300
SERVER_SIDE_ENCRYPTION = "AES256"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _parse_int_env(name: str, default: int, *, contract_max: int | None = None) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    if isinstance(contract_max, int) and contract_max > 0:
        value = min(value, contract_max)
    return value


def get_max_upload_bytes() -> int:
    """Maximum accepted upload size (default/clamped 100 MiB)."""
    return _parse_int_env("EXPLORER_MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES, contract_max=MAX_UPLOAD_BYTES)


__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "DOWNLOAD_URL_TTL_SECONDS",
    "MAX_UPLOAD_BYTES",
    "SERVER_SIDE_ENCRYPTION",
    "get_max_upload_bytes",
]
