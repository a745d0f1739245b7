from __future__ import annotations
from collections import deque
import math

from loudnessqc.types import LoudnessResult, Measurement


class MeasurementHistory:
    """
    Timestamped loudness snapshots for graphs and compliance reports.

    ``interval_s`` drops snapshots arriving sooner than that after the last
    kept one; ``window_s`` keeps only the trailing time span.
    """

    def __init__(self, *, interval_s: float = 0.0, window_s: float | None = None):
        if interval_s < 0:
            raise ValueError("interval_s must be non-negative.")
        if window_s is not None and window_s <= 0:
            raise ValueError("window_s must be positive.")
        self.interval_s = float(interval_s)
        self.window_s = window_s
        self._items: deque[Measurement] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def record(self, result: LoudnessResult, timestamp: float) -> Measurement | None:
        """Append a snapshot of ``result``; returns it, or None if dropped."""
        if not math.isfinite(result.momentary):
            return None
        if self._items and timestamp - self._items[-1].timestamp < self.interval_s:
            return None
        m = Measurement(
            timestamp=float(timestamp),
            momentary=result.momentary,
            short_term=result.short_term,
            integrated=result.integrated,
            true_peak=result.true_peak,
            lra=result.lra,
        )
        self._items.append(m)
        if self.window_s is not None:
            cutoff = timestamp - self.window_s
            while self._items and self._items[0].timestamp <= cutoff:
                self._items.popleft()
        return m

    def measurements(self) -> list[Measurement]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
