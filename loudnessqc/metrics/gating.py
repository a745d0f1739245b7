"""Gated integrated loudness (absolute -70 LUFS gate, then relative -10 LU gate)."""
from __future__ import annotations

import numpy as np

from loudnessqc.metrics.blocks import power_to_lufs, powers_to_lufs
from loudnessqc.types import NEG_INF

ABSOLUTE_GATE_LUFS = -70.0
RELATIVE_GATE_LU = -10.0
# 30 minutes of 100 ms blocks
GATED_HISTORY_CAPACITY = 18000


def relative_gate(powers: np.ndarray) -> np.ndarray:
    """Return the blocks louder than (ungated loudness - 10 LU)."""
    p = np.asarray(powers, dtype=np.float64)
    if p.size == 0:
        return p
    threshold = power_to_lufs(float(np.mean(p))) + RELATIVE_GATE_LU
    return p[powers_to_lufs(p) > threshold]


class GatedIntegrator:
    """
    Ring buffer of block powers that passed the absolute gate.

    Storage is a fixed arena, so memory and per-measurement cost stay bounded
    however long the session runs. Once full, the oldest block is overwritten.
    """

    def __init__(self, capacity: int = GATED_HISTORY_CAPACITY):
        if capacity <= 0:
            raise ValueError("Gated history capacity must be positive.")
        self.capacity = int(capacity)
        self._arena = np.zeros(self.capacity, dtype=np.float64)
        self._next = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def push(self, power: float) -> bool:
        """Store the block if it clears the absolute gate. Returns True if stored."""
        if not power_to_lufs(power) > ABSOLUTE_GATE_LUFS:
            return False
        self._arena[self._next] = power
        self._next = (self._next + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)
        return True

    def powers(self) -> np.ndarray:
        """Stored powers, oldest first (a copy)."""
        if self._count < self.capacity:
            return self._arena[:self._count].copy()
        return np.concatenate((self._arena[self._next:], self._arena[:self._next]))

    def measure(self) -> tuple[float, np.ndarray]:
        """Return (integrated loudness, relatively gated powers)."""
        gated = relative_gate(self.powers())
        if gated.size == 0:
            return NEG_INF, gated
        return power_to_lufs(float(np.mean(gated))), gated

    def clear(self) -> None:
        self._arena.fill(0.0)
        self._next = 0
        self._count = 0
