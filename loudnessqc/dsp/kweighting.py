"""K-weighting pre-filter (ITU-R BS.1770-4) with persistent per-channel state."""
from __future__ import annotations
import math

import numpy as np
from scipy.signal import sosfilt

# Published 48 kHz coefficients, rows are [b0, b1, b2, a0, a1, a2].
BS1770_48K_SOS = np.array(
    [
        [1.53512485958697, -2.69169618940638, 1.19839281085285,
         1.0, -1.69065929318241, 0.73248077421585],
        [1.0, -2.0, 1.0,
         1.0, -1.99004745483398, 0.99007225036621],
    ],
    dtype=np.float64,
)

# Analogue prototype of the two stages, used for every other sample rate.
SHELF_F0_HZ = 1681.974450955533
SHELF_GAIN_DB = 3.999843853973347
SHELF_Q = 0.7071752369554196
SHELF_VB_EXPONENT = 0.4996667741545416
HIGHPASS_F0_HZ = 38.13547087602444
HIGHPASS_Q = 0.5003270373238773

N_STAGES = 2


def _shelf_section(fs: float) -> list[float]:
    k = math.tan(math.pi * SHELF_F0_HZ / fs)
    vh = 10.0 ** (SHELF_GAIN_DB / 20.0)
    vb = vh ** SHELF_VB_EXPONENT
    a0 = 1.0 + k / SHELF_Q + k * k
    return [
        (vh + vb * k / SHELF_Q + k * k) / a0,
        2.0 * (k * k - vh) / a0,
        (vh - vb * k / SHELF_Q + k * k) / a0,
        1.0,
        2.0 * (k * k - 1.0) / a0,
        (1.0 - k / SHELF_Q + k * k) / a0,
    ]


def _highpass_section(fs: float) -> list[float]:
    k = math.tan(math.pi * HIGHPASS_F0_HZ / fs)
    a0 = 1.0 + k / HIGHPASS_Q + k * k
    return [
        1.0,
        -2.0,
        1.0,
        1.0,
        2.0 * (k * k - 1.0) / a0,
        (1.0 - k / HIGHPASS_Q + k * k) / a0,
    ]


def k_weighting_sos(fs: float) -> np.ndarray:
    """
    Return the shelf + high-pass cascade as a (2, 6) second-order-sections array.

    48 kHz uses the BS.1770-4 table; any other rate is derived from the
    analogue prototype via the bilinear transform.
    """
    if fs <= 0:
        raise ValueError("Sample rate must be positive.")
    if fs == 48000:
        return BS1770_48K_SOS.copy()
    return np.array([_shelf_section(fs), _highpass_section(fs)], dtype=np.float64)


class KWeightingFilterBank:
    """Per-channel K-weighting cascade whose state survives between calls."""

    def __init__(self, channels: int, fs: float):
        if channels <= 0:
            raise ValueError("Channel count must be positive.")
        self.channels = int(channels)
        self.fs = float(fs)
        self.sos = k_weighting_sos(self.fs)
        # (channel, stage, 2) transposed direct-form II state
        self._zi = np.zeros((self.channels, N_STAGES, 2), dtype=np.float64)

    def filter(self, samples: np.ndarray, channel: int) -> np.ndarray:
        """Filter one channel's run of samples, advancing that channel's state."""
        x = np.asarray(samples, dtype=np.float64)
        y, self._zi[channel] = sosfilt(self.sos, x, zi=self._zi[channel])
        return y

    def process(self, frame: np.ndarray) -> np.ndarray:
        """Filter a (channels, samples) frame."""
        out = np.empty(frame.shape, dtype=np.float64)
        for ch in range(self.channels):
            out[ch] = self.filter(frame[ch], ch)
        return out

    def reset(self) -> None:
        self._zi.fill(0.0)
