"""Human-readable formatting for object listings."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_file_size(num_bytes: int) -> str:
    """Format a byte count with base-1024 units and two decimals.

    >>> format_file_size(0)
    '0 Bytes'
    >>> format_file_size(10 * 1024 * 1024)
    '10.00 MB'
    """
    if num_bytes <= 0:
        return "0 Bytes"
    index = 0
    while num_bytes >= 1024 ** (index + 1) and index < len(SIZE_UNITS) - 1:
        index += 1
    return f"{num_bytes / (1024 ** index):.2f} {SIZE_UNITS[index]}"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")
