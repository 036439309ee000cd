"""Deterministic JSON encoding used as the exact input to signing.

Mappings are emitted with their keys in lexicographic order, sequences keep
their order, and no whitespace is inserted. Signer and verifier must both go
through `canonicalize`; any divergence makes every signature unverifiable.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from typing import Any


def _encode_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise ValueError("Non-finite numbers cannot be canonicalized")
    # Integral floats render without a fraction, as JSON clients emit them.
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return json.dumps(value)


def _encode(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (int, float)):
        return _encode_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        for key in value:
            if not isinstance(key, str):
                raise TypeError(f"Mapping keys must be strings, got {type(key).__name__}")
        pairs = (
            f"{json.dumps(key, ensure_ascii=False)}:{_encode(value[key])}"
            for key in sorted(value)
        )
        return "{" + ",".join(pairs) + "}"
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return "[" + ",".join(_encode(item) for item in value) + "]"
    raise TypeError(f"Cannot canonicalize value of type {type(value).__name__}")


def canonicalize(value: Any) -> str:
    """Return the canonical text encoding of a JSON-like value.

    Args:
        value: None, bool, int, float, str, a sequence, or a str-keyed mapping,
            nested arbitrarily.

    Returns:
        A compact string that is identical for semantically equal values
        regardless of mapping insertion order.

    Raises:
        TypeError: If the value contains a non-JSON type or a non-string key.
        ValueError: If the value contains NaN or an infinity.
    """
    return _encode(value)
