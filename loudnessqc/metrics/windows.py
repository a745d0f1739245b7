"""Momentary and short-term sliding windows over block powers."""
from __future__ import annotations
from collections import deque

from loudnessqc.metrics.blocks import power_to_lufs
from loudnessqc.types import NEG_INF

MOMENTARY_BLOCKS = 4
SHORT_TERM_BLOCKS = 30


class PowerWindow:
    """Last ``capacity`` block powers; oldest evicted first."""

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Window capacity must be positive.")
        self.capacity = int(capacity)
        self._powers: deque[float] = deque(maxlen=self.capacity)

    def __len__(self) -> int:
        return len(self._powers)

    def push(self, power: float) -> None:
        self._powers.append(float(power))

    def loudness(self) -> float:
        """Loudness of the mean power in the window, -inf when empty."""
        if not self._powers:
            return NEG_INF
        return power_to_lufs(sum(self._powers) / len(self._powers))

    def clear(self) -> None:
        self._powers.clear()


def momentary_window() -> PowerWindow:
    return PowerWindow(MOMENTARY_BLOCKS)


def short_term_window() -> PowerWindow:
    return PowerWindow(SHORT_TERM_BLOCKS)
