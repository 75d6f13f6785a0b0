"""Hashing, base64 and rounding helpers shared across corenft."""

from __future__ import annotations

import base64
import hashlib
import math
from decimal import Decimal


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def tx_hash(tx_bytes: bytes) -> str:
    """Hash a raw transaction the way the node indexes it (upper-case hex)."""
    return sha256_hex(tx_bytes).upper()


def base64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def base64_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.b64decode(value + padding)


def ceil_int(value: Decimal) -> int:
    return int(math.ceil(value))
