from __future__ import annotations
import json
import math


def json_safe(obj):
    """Recursively replace non-finite floats with None so strict JSON can encode them."""
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {k: json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(v) for v in obj]
    return obj


def canonical_dumps(obj) -> str:
    """Serialize to canonical JSON (sorted keys, minimal whitespace, no NaN/Infinity)."""
    return json.dumps(
        json_safe(obj),
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
        allow_nan=False,
    )
