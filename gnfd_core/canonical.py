"""
gnfd_core/canonical.py — Canonical JSON for transaction sign documents.

Sign documents are encoded the way the chain's legacy JSON signing mode
expects: object keys sorted, no insignificant whitespace, UTF-8 output.
Two encoders given the same logical document MUST produce identical bytes,
so anything that would make the output ambiguous is rejected up front.

Policy wire JSON (policy.py) is NOT canonicalized: it keeps field
declaration order.
"""

from __future__ import annotations

import json
import math
from typing import Any

# Integers beyond this cannot survive a round trip through an IEEE 754
# double; the chain carries such amounts as decimal strings instead.
_MAX_SAFE_INTEGER = 2**53


def canonicalize(obj: Any) -> bytes:
    """Encode a JSON-compatible object as canonical JSON bytes.

    Raises:
        ValueError: NaN/Infinity, or an integer outside the safe range.
        TypeError: Non-JSON types or non-string object keys.
    """
    _check(obj, "$")
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def _check(value: Any, path: str) -> None:
    if value is None or isinstance(value, (bool, str)):
        return
    if isinstance(value, int):
        if abs(value) > _MAX_SAFE_INTEGER:
            raise ValueError(
                f"Integer {value} at {path} exceeds 2^53; encode it as a string"
            )
        return
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"NaN and Infinity are not valid JSON (at {path})")
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(
                    f"Dict key must be string, got {type(k).__name__}: {k!r}"
                )
            _check(v, f"{path}.{k}")
        return
    raise TypeError(
        f"Cannot canonicalize type {type(value).__name__} at {path}. "
        f"Only JSON-compatible types are allowed."
    )
