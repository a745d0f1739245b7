"""100 ms block energy accumulation."""
from __future__ import annotations
import math
from typing import Sequence

import numpy as np

from loudnessqc.types import NEG_INF

BLOCK_SECONDS = 0.1
LUFS_OFFSET = -0.691


def power_to_lufs(power: float) -> float:
    """Convert summed mean-square power to LUFS; non-positive power is -inf."""
    if not power > 0:
        return NEG_INF
    return LUFS_OFFSET + 10.0 * math.log10(power)


def powers_to_lufs(powers: np.ndarray) -> np.ndarray:
    """Vectorised power_to_lufs."""
    p = np.asarray(powers, dtype=np.float64)
    with np.errstate(divide="ignore"):
        out = LUFS_OFFSET + 10.0 * np.log10(np.where(p > 0, p, 0.0))
    return out


def block_size_for(fs: float) -> int:
    """Number of samples in one 100 ms block."""
    return max(1, int(math.floor(fs * BLOCK_SECONDS)))


class BlockAccumulator:
    """
    Collect filtered samples into non-overlapping 100 ms blocks.

    A push may finish zero, one or several blocks; the unfinished tail is kept
    for the next push.
    """

    def __init__(
        self,
        channels: int,
        block_size: int,
        weights: Sequence[float] | None = None
    ):
        if block_size <= 0:
            raise ValueError("block_size must be positive.")
        self.channels = int(channels)
        self.block_size = int(block_size)
        self.weights = _channel_weights(self.channels, weights)
        self._buf = np.zeros((self.channels, self.block_size), dtype=np.float64)
        self._fill = 0

    @property
    def pending(self) -> int:
        return self._fill

    def push(self, filtered: np.ndarray) -> list[float]:
        """Append a (channels, samples) run and return powers of finished blocks."""
        n = filtered.shape[1]
        powers: list[float] = []
        pos = 0
        while pos < n:
            take = min(n - pos, self.block_size - self._fill)
            self._buf[:, self._fill:self._fill + take] = filtered[:, pos:pos + take]
            self._fill += take
            pos += take
            if self._fill >= self.block_size:
                mean_square = np.mean(self._buf * self._buf, axis=1)
                powers.append(float(np.dot(self.weights, mean_square)))
                self._fill = 0
        return powers

    def reset(self) -> None:
        self._buf.fill(0.0)
        self._fill = 0


def _channel_weights(channels: int, weights: Sequence[float] | None) -> np.ndarray:
    """Per-channel gains; missing entries default to 1.0, extras are ignored."""
    w = np.ones(channels, dtype=np.float64)
    if weights:
        given = [float(v) for v in weights][:channels]
        w[:len(given)] = given
    return w
