"""Loudness range from the relatively gated block distribution."""
from __future__ import annotations
import math

import numpy as np

from loudnessqc.metrics.blocks import power_to_lufs

LOW_PERCENTILE = 0.10
HIGH_PERCENTILE = 0.95


def loudness_range(
    gated_powers: np.ndarray,
    *,
    low: float = LOW_PERCENTILE,
    high: float = HIGH_PERCENTILE
) -> float:
    """
    Compute LRA in LU as the spread between two percentile blocks.

    Percentiles are taken by index into the ascending powers
    (floor(n * low), floor(n * high)), not interpolated. Fewer than two
    blocks gives 0.
    """
    p = np.sort(np.asarray(gated_powers, dtype=np.float64))
    n = p.size
    if n < 2:
        return 0.0
    lo_idx = int(math.floor(n * low))
    hi_idx = min(n - 1, int(math.floor(n * high)))
    if hi_idx <= lo_idx:
        return 0.0
    spread = power_to_lufs(float(p[hi_idx])) - power_to_lufs(float(p[lo_idx]))
    if not math.isfinite(spread):
        return 0.0
    return max(0.0, spread)
