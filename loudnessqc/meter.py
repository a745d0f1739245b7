"""
Streaming EBU R128 / ITU-R BS.1770-4 loudness meter.

One ``LoudnessMeter`` serves one measurement session. Feed it frames with
``process``; each call returns an immutable ``LoudnessResult``. A change in
channel count or sample rate re-initialises the meter and discards all
accumulated history.

Deviations from the reference algorithm, kept on purpose:
- gating blocks are non-overlapping 100 ms blocks (BS.1770 uses 400 ms
  blocks with 75% overlap);
- true peak is the sample peak plus a fixed 0.5 dB, not a 4x oversampled
  reconstruction;
- LRA is taken from the relatively gated 100 ms blocks rather than from
  3 s short-term values.
"""
from __future__ import annotations
import logging
import math
from typing import Sequence

import numpy as np

from loudnessqc.dsp.kweighting import KWeightingFilterBank
from loudnessqc.metrics.blocks import BlockAccumulator, block_size_for
from loudnessqc.metrics.gating import GATED_HISTORY_CAPACITY, GatedIntegrator
from loudnessqc.metrics.lra import loudness_range
from loudnessqc.metrics.truepeak import TruePeakTracker
from loudnessqc.metrics.windows import momentary_window, short_term_window
from loudnessqc.types import NEG_INF, LoudnessResult

logger = logging.getLogger(__name__)


def _coerce_frame(channels) -> np.ndarray | None:
    """Return a (channels, samples) float64 array, or None if the frame is malformed."""
    try:
        if isinstance(channels, np.ndarray):
            if channels.ndim != 2:
                return None
            frame = channels.astype(np.float64)
        else:
            rows = [np.asarray(ch, dtype=np.float64) for ch in channels]
            if not rows or any(r.ndim != 1 for r in rows):
                return None
            if len({r.size for r in rows}) != 1:
                return None
            frame = np.stack(rows)
    except (TypeError, ValueError):
        return None
    if frame.shape[0] == 0 or frame.shape[1] == 0:
        return None
    return frame


class LoudnessMeter:
    """Stateful loudness pipeline: K-weighting, 100 ms blocks, windows and gating."""

    def __init__(
        self,
        *,
        gated_history_blocks: int = GATED_HISTORY_CAPACITY,
        channel_weights: Sequence[float] | None = None
    ):
        if gated_history_blocks <= 0:
            raise ValueError("gated_history_blocks must be positive.")
        self.gated_history_blocks = int(gated_history_blocks)
        self.channel_weights = (
            tuple(float(w) for w in channel_weights) if channel_weights is not None else None
        )
        self.channels: int | None = None
        self.sample_rate: float | None = None
        self._filters: KWeightingFilterBank | None = None
        self._blocks: BlockAccumulator | None = None
        self._momentary = momentary_window()
        self._short_term = short_term_window()
        self._gated = GatedIntegrator(self.gated_history_blocks)
        self._peak = TruePeakTracker()
        self._clear_measurements()

    @property
    def result(self) -> LoudnessResult:
        """Most recent result (initial result before any successful call)."""
        return self._result

    @property
    def block_count(self) -> int:
        return self._block_count

    def initialize(self, channel_count: int, sample_rate: float) -> None:
        """
        Configure filter topology and block size.

        A no-op when the configuration is unchanged. Otherwise every
        accumulator, queue, maximum and filter state starts from scratch.
        """
        if channel_count <= 0:
            raise ValueError("channel_count must be positive.")
        if not sample_rate > 0:
            raise ValueError("sample_rate must be positive.")
        if channel_count == self.channels and float(sample_rate) == self.sample_rate:
            return
        if self.channels is not None:
            logger.info(
                "Re-initialising loudness meter (%s ch @ %s Hz -> %d ch @ %s Hz); "
                "accumulated history discarded.",
                self.channels, self.sample_rate, channel_count, sample_rate,
            )
        self.channels = int(channel_count)
        self.sample_rate = float(sample_rate)
        self._filters = KWeightingFilterBank(self.channels, self.sample_rate)
        self._blocks = BlockAccumulator(
            self.channels,
            block_size_for(self.sample_rate),
            weights=self.channel_weights,
        )
        self._momentary.clear()
        self._short_term.clear()
        self._gated.clear()
        self._peak.reset()
        self._clear_measurements()

    def reset(self) -> None:
        """Start a new integration period; keeps channel count and sample rate."""
        if self._filters is not None:
            self._filters.reset()
        if self._blocks is not None:
            self._blocks.reset()
        self._momentary.clear()
        self._short_term.clear()
        self._gated.clear()
        self._peak.reset()
        self._clear_measurements()

    def process(self, channels, sample_rate: float) -> LoudnessResult:
        """
        Measure one frame of per-channel samples.

        Malformed frames (no channels, no samples, unequal channel lengths)
        and non-positive sample rates are skipped and the previous result is
        returned. Non-finite samples are measured as zero.
        """
        frame = _coerce_frame(channels)
        if frame is None:
            logger.debug("Skipping malformed frame.")
            return self._result
        try:
            fs = float(sample_rate)
        except (TypeError, ValueError):
            logger.debug("Skipping frame with invalid sample rate %r.", sample_rate)
            return self._result
        if not (fs > 0 and math.isfinite(fs)):
            logger.debug("Skipping frame with invalid sample rate %r.", sample_rate)
            return self._result

        self.initialize(frame.shape[0], fs)

        if not np.all(np.isfinite(frame)):
            logger.debug("Replacing non-finite samples with zero.")
            frame = np.nan_to_num(frame, nan=0.0, posinf=0.0, neginf=0.0)

        true_peak = self._peak.update(frame)
        filtered = self._filters.process(frame)
        new_blocks = self._blocks.push(filtered)
        for power in new_blocks:
            self._momentary.push(power)
            self._short_term.push(power)
            self._gated.push(power)
        if new_blocks:
            self._block_count += len(new_blocks)
            self._integrated, gated = self._gated.measure()
            self._lra = loudness_range(gated)

        momentary = self._momentary.loudness()
        short_term = self._short_term.loudness()
        if math.isfinite(momentary) and momentary > self._max_momentary:
            self._max_momentary = momentary
        if math.isfinite(short_term) and short_term > self._max_short_term:
            self._max_short_term = short_term

        self._result = LoudnessResult(
            momentary=momentary,
            short_term=short_term,
            integrated=self._integrated,
            true_peak=true_peak,
            lra=self._lra,
            max_momentary=self._max_momentary,
            max_short_term=self._max_short_term,
            max_true_peak=self._peak.maximum,
        )
        return self._result

    def _clear_measurements(self) -> None:
        self._integrated = NEG_INF
        self._lra = 0.0
        self._max_momentary = NEG_INF
        self._max_short_term = NEG_INF
        self._block_count = 0
        self._result = LoudnessResult()
