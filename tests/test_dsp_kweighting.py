from __future__ import annotations

import numpy as np
import pytest
from scipy.signal import sosfreqz

from loudnessqc.dsp.kweighting import (
    BS1770_48K_SOS,
    KWeightingFilterBank,
    _highpass_section,
    _shelf_section,
    k_weighting_sos,
)


def _gain_db(sos: np.ndarray, freq_hz: float, fs: float) -> float:
    _, h = sosfreqz(sos, worN=[freq_hz], fs=fs)
    return float(20.0 * np.log10(np.abs(h[0])))


def test_48k_uses_published_table():
    sos = k_weighting_sos(48000)
    assert np.array_equal(sos, BS1770_48K_SOS)
    sos[0, 0] = 0.0
    assert BS1770_48K_SOS[0, 0] != 0.0


def test_prototype_reproduces_48k_table():
    derived = np.array([_shelf_section(48000.0), _highpass_section(48000.0)])
    assert np.allclose(derived, BS1770_48K_SOS, atol=1e-5)


@pytest.mark.parametrize("fs", [44100.0, 48000.0, 96000.0])
def test_response_shape(fs):
    sos = k_weighting_sos(fs)
    assert sos.shape == (2, 6)
    assert np.allclose(sos[:, 3], 1.0)
    # ~ +0.69 dB at 1 kHz, which the -0.691 LUFS offset cancels
    assert _gain_db(sos, 1000.0, fs) == pytest.approx(0.69, abs=0.05)
    assert _gain_db(sos, 10000.0, fs) == pytest.approx(4.0, abs=0.5)
    assert _gain_db(sos, 10.0, fs) < -10.0


def test_invalid_sample_rate():
    with pytest.raises(ValueError):
        k_weighting_sos(0)
    with pytest.raises(ValueError):
        KWeightingFilterBank(0, 48000)


def test_state_carries_across_calls():
    rng = np.random.default_rng(1)
    x = rng.standard_normal((2, 4800))
    whole = KWeightingFilterBank(2, 48000).process(x)

    bank = KWeightingFilterBank(2, 48000)
    parts = [bank.process(x[:, i:i + 333]) for i in range(0, x.shape[1], 333)]
    assert np.allclose(np.concatenate(parts, axis=1), whole, atol=1e-12)


def test_channels_filtered_independently():
    rng = np.random.default_rng(2)
    x = rng.standard_normal((2, 1000))
    bank = KWeightingFilterBank(2, 48000)
    y = bank.process(x)
    solo = KWeightingFilterBank(1, 48000).process(x[1:2])
    assert np.allclose(y[1], solo[0])


def test_reset_matches_fresh_bank():
    rng = np.random.default_rng(3)
    x = rng.standard_normal((1, 2000))
    bank = KWeightingFilterBank(1, 44100)
    first = bank.process(x)
    bank.process(rng.standard_normal((1, 500)))
    bank.reset()
    assert np.array_equal(bank.process(x), first)
