"""
SOLPRISM Trace Hashing

All hashes are SHA-256 over the canonical JSON encoding, rendered as
64 lowercase hexadecimal characters with no prefix.
"""

import hashlib
from typing import Any, Union

from .canonicalization import canonicalize


def sha256_hex(data: Union[bytes, str]) -> str:
    """Compute SHA-256 hash and return as lowercase hex string."""
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.sha256(data).hexdigest()


def hash_trace(trace: Any) -> str:
    """
    Deterministically hash a reasoning trace.

    Accepts a ReasoningTrace or its plain-dict wire form; both produce
    the same hash.
    """
    return sha256_hex(canonicalize(trace))


def short_hash(h: str, length: int = 16) -> str:
    """Truncated hash for log lines."""
    return f"{h[:length]}..."
