"""
Small utilities shared by the stores and the lifecycle service.

This module intentionally avoids third-party dependencies.
"""

from __future__ import annotations

import os
import time
from datetime import datetime, timezone


_CROCKFORD32 = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def _encode_crockford_base32(value: int, length: int) -> str:
    chars: list[str] = []
    for _ in range(length):
        chars.append(_CROCKFORD32[value & 31])
        value >>= 5
    return "".join(reversed(chars))


def new_ulid(*, timestamp_ms: int | None = None) -> str:
    """
    Generate a ULID (26 chars, Crockford base32) for use as a transaction id.

    ULID = 48-bit millisecond timestamp + 80-bit randomness.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    if not (0 <= timestamp_ms < (1 << 48)):
        raise ValueError("timestamp_ms out of range for ULID")

    randomness = int.from_bytes(os.urandom(10), "big")
    value = (timestamp_ms << 80) | randomness
    return _encode_crockford_base32(value, 26)


def now_timestamp() -> tuple[int, int]:
    """Current wall clock as (seconds, nanos)."""
    ns = time.time_ns()
    return ns // 1_000_000_000, ns % 1_000_000_000


def format_timestamp(seconds: int, nanos: int) -> str:
    """
    Render a (seconds, nanos) commit timestamp for humans.

    Example: ``2024-01-01 00:00:00.5 +0000 UTC``. The fractional part is
    omitted when zero and trailing zeros are trimmed.
    """
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    text = dt.strftime("%Y-%m-%d %H:%M:%S")
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return text + " +0000 UTC"
