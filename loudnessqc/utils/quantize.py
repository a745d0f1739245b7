from __future__ import annotations
import math


def q(x: float | None, step: float) -> float | None:
    """Round half away from zero to a multiple of ``step``; non-finite values become None."""
    if x is None or not math.isfinite(x):
        return None
    inv = 1.0 / step
    y = x * inv
    yq = math.floor(y + 0.5) if y >= 0 else -math.floor(-y + 0.5)
    return yq / inv


def q_db(x: float | None) -> float | None:
    """Quantize a dB/LUFS/LU reading for reports."""
    return q(x, 0.01)
