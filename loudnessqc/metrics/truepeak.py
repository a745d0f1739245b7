"""True peak estimation."""
from __future__ import annotations
import math

import numpy as np

from loudnessqc.types import NEG_INF

# Fixed allowance for inter-sample overshoot. This is an approximation of
# BS.1770 Annex 2, not a 4x oversampled reconstruction.
INTERSAMPLE_OVERSHOOT_DB = 0.5


def sample_peak(frame: np.ndarray) -> float:
    """Largest absolute sample across all channels of a frame."""
    x = np.asarray(frame, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.max(np.abs(x)))


def peak_to_dbtp(peak: float) -> float:
    """Convert a linear sample peak to the approximate dBTP reading."""
    if not peak > 0:
        return NEG_INF
    return 20.0 * math.log10(peak) + INTERSAMPLE_OVERSHOOT_DB


class TruePeakTracker:
    """Per-call true peak plus the session maximum."""

    def __init__(self):
        self.current = NEG_INF
        self.maximum = NEG_INF

    def update(self, frame: np.ndarray) -> float:
        """Measure an unfiltered (channels, samples) frame."""
        self.current = peak_to_dbtp(sample_peak(frame))
        if self.current > self.maximum:
            self.maximum = self.current
        return self.current

    def reset(self) -> None:
        self.current = NEG_INF
        self.maximum = NEG_INF
