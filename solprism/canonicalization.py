"""
SOLPRISM Canonical JSON Encoding

A reasoning trace is committed by hashing bytes, so two traces carrying the
same content must serialize to the same bytes no matter how they were
assembled: which builder made them, what order their dict keys were
inserted in, or whether a JSON round trip turned 82.0 into 82.
"""

import json
from typing import Any, Dict, List, Sequence


def canonicalize(obj: Any) -> bytes:
    """
    Encode a trace (or any JSON-like value) to its commitment bytes.

    Objects have their keys sorted at every depth, arrays keep their order,
    integral floats are written as integers and the output is compact
    UTF-8 without ASCII escapes. Trace dataclasses go through ``to_dict()``.

    Raises:
        ValueError: NaN or Infinity, a non-string object key, or a value
            with no JSON form
        RecursionError: a structure that contains itself
    """
    return json.dumps(
        _normalize(obj),
        separators=(',', ':'),
        ensure_ascii=False,
        allow_nan=False,
    ).encode('utf-8')


def canonicalize_str(obj: Any) -> str:
    """Canonical encoding as text."""
    return canonicalize(obj).decode('utf-8')


def _normalize(value: Any) -> Any:
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        # 82.0 encodes as 82, as JSON.stringify does below 1e21
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, dict):
        return _normalize_object(value)
    if isinstance(value, (list, tuple)):
        return _normalize_array(value)
    if hasattr(value, "to_dict"):
        return _normalize(value.to_dict())
    raise ValueError(f"Cannot canonicalize type: {type(value)}")


def _normalize_object(obj: Dict[str, Any]) -> Dict[str, Any]:
    bad_keys = [k for k in obj if not isinstance(k, str)]
    if bad_keys:
        raise ValueError(f"Object keys must be strings, got {type(bad_keys[0])}")
    return {k: _normalize(obj[k]) for k in sorted(obj)}


def _normalize_array(items: Sequence[Any]) -> List[Any]:
    return [_normalize(item) for item in items]
