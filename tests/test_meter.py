from __future__ import annotations

import dataclasses
import math

import numpy as np
import pytest

from loudnessqc.meter import LoudnessMeter
from loudnessqc.types import LoudnessResult

from tests.conftest import FS, amplitude_for_lufs, feed, sine


def _tone(lufs: float, duration_s: float, fs: int = FS) -> np.ndarray:
    return sine(duration_s, amp=amplitude_for_lufs(lufs), fs=fs)


def test_initial_result():
    meter = LoudnessMeter()
    assert meter.result == LoudnessResult()
    assert meter.block_count == 0


def test_silence_measures_nothing():
    meter = LoudnessMeter()
    r = feed(meter, np.zeros(FS))[-1]
    assert r.momentary == -math.inf
    assert r.short_term == -math.inf
    assert r.integrated == -math.inf
    assert r.true_peak == -math.inf
    assert r.lra == 0.0
    assert meter.block_count == 10


def test_silence_then_tone():
    meter = LoudnessMeter()
    signal = np.concatenate([np.zeros(10 * FS), _tone(-20.0, 20.0)])
    results = feed(meter, signal)
    r = results[-1]
    assert r.integrated == pytest.approx(-20.0, abs=0.1)
    assert r.momentary == pytest.approx(-20.0, abs=0.1)
    assert r.short_term == pytest.approx(-20.0, abs=0.1)
    assert r.lra == pytest.approx(0.0, abs=0.1)
    expected_tp = 20.0 * math.log10(amplitude_for_lufs(-20.0)) + 0.5
    assert r.true_peak == pytest.approx(expected_tp, abs=0.01)
    assert r.max_true_peak == pytest.approx(expected_tp, abs=0.01)
    assert meter.block_count == 300


def test_momentary_reacts_before_short_term():
    meter = LoudnessMeter()
    feed(meter, _tone(-30.0, 5.0))
    r = feed(meter, _tone(-20.0, 0.5))[-1]
    assert r.momentary == pytest.approx(-20.0, abs=0.2)
    assert r.short_term < -25.0


def test_trailing_silence_is_gated_out():
    meter = LoudnessMeter()
    feed(meter, _tone(-20.0, 10.0))
    r = feed(meter, np.zeros(5 * FS))[-1]
    assert r.momentary == -math.inf
    assert r.integrated == pytest.approx(-20.0, abs=0.1)
    assert r.max_momentary == pytest.approx(-20.0, abs=0.2)


def test_frame_size_does_not_change_result():
    signal = _tone(-18.0, 6.0)
    a = feed(LoudnessMeter(), signal, frame_size=960)[-1]
    b = feed(LoudnessMeter(), signal, frame_size=4411)[-1]
    assert a.integrated == pytest.approx(b.integrated, abs=1e-9)
    assert a.short_term == pytest.approx(b.short_term, abs=1e-9)
    assert a.lra == pytest.approx(b.lra, abs=1e-9)


def test_44k1_tone():
    meter = LoudnessMeter()
    r = feed(meter, _tone(-20.0, 5.0, fs=44100), fs=44100, frame_size=882)[-1]
    assert r.integrated == pytest.approx(-20.0, abs=0.1)
    assert meter.block_count == 50


def test_stereo_channels_sum():
    meter = LoudnessMeter()
    tone = _tone(-20.0, 3.0)
    r = feed(meter, np.vstack([tone, tone]))[-1]
    assert r.integrated == pytest.approx(-16.99, abs=0.1)


def test_channel_weights():
    meter = LoudnessMeter(channel_weights=[1.0, 0.0])
    tone = _tone(-20.0, 3.0)
    r = feed(meter, np.vstack([tone, tone]))[-1]
    assert r.integrated == pytest.approx(-20.0, abs=0.1)


def test_bounded_gated_history():
    meter = LoudnessMeter(gated_history_blocks=10)
    feed(meter, _tone(-10.0, 2.0))
    r = feed(meter, _tone(-30.0, 2.0))[-1]
    assert r.integrated == pytest.approx(-30.0, abs=0.1)


def test_reset_reproduces_fresh_results():
    rng = np.random.default_rng(7)
    signal = 0.1 * rng.standard_normal((2, 3 * FS))
    meter = LoudnessMeter()
    first = feed(meter, signal)
    meter.reset()
    assert meter.result == LoudnessResult()
    second = feed(meter, signal)
    assert second == first
    assert feed(LoudnessMeter(), signal) == first


def test_malformed_frames_are_skipped():
    meter = LoudnessMeter()
    good = feed(meter, _tone(-20.0, 1.0))[-1]
    blocks = meter.block_count
    for bad in ([], [[]], [[0.1, 0.2], [0.1]], np.zeros(5), np.zeros((2, 0))):
        assert meter.process(bad, FS) is good
    assert meter.process([[0.1, 0.2]], 0) is good
    assert meter.process([[0.1, 0.2]], float("nan")) is good
    assert meter.block_count == blocks
    assert meter.channels == 1
    assert meter.sample_rate == FS


def test_list_of_channel_arrays_accepted():
    meter = LoudnessMeter()
    tone = _tone(-20.0, 1.0)
    r = meter.process([tone, tone], FS)
    assert meter.channels == 2
    assert math.isfinite(r.integrated)


def test_non_finite_samples_are_zeroed():
    meter = LoudnessMeter()
    frame = np.full((1, 4800), 0.25)
    frame[0, 10] = np.nan
    frame[0, 20] = np.inf
    r = meter.process(frame, FS)
    assert r.true_peak == pytest.approx(20.0 * math.log10(0.25) + 0.5)
    assert math.isfinite(r.momentary)
    r = feed(meter, _tone(-20.0, 2.0))[-1]
    assert math.isfinite(r.integrated)


def test_sample_rate_change_reinitialises():
    meter = LoudnessMeter()
    feed(meter, _tone(-20.0, 2.0))
    r = meter.process(np.full((1, 960), 0.5), 44100)
    assert meter.sample_rate == 44100
    assert meter.block_count == 0
    assert r.integrated == -math.inf
    assert r.max_momentary == -math.inf
    assert r.max_true_peak == pytest.approx(20.0 * math.log10(0.5) + 0.5)


def test_channel_count_change_reinitialises():
    meter = LoudnessMeter()
    feed(meter, _tone(-20.0, 2.0))
    meter.process(np.zeros((2, 960)), FS)
    assert meter.channels == 2
    assert meter.block_count == 0


def test_initialize_unchanged_is_noop():
    meter = LoudnessMeter()
    feed(meter, _tone(-20.0, 1.0))
    before = meter.result
    meter.initialize(1, FS)
    assert meter.block_count == 10
    assert meter.result is before


def test_initialize_rejects_invalid_config():
    meter = LoudnessMeter()
    with pytest.raises(ValueError):
        meter.initialize(0, FS)
    with pytest.raises(ValueError):
        meter.initialize(2, 0)
    with pytest.raises(ValueError):
        LoudnessMeter(gated_history_blocks=0)


def test_results_are_immutable_snapshots():
    meter = LoudnessMeter()
    first = feed(meter, _tone(-20.0, 1.0))[-1]
    snapshot = dataclasses.replace(first)
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.integrated = 0.0
    feed(meter, _tone(-10.0, 1.0))
    assert first == snapshot


def test_maxima_never_decrease():
    meter = LoudnessMeter()
    signal = np.concatenate([_tone(-15.0, 2.0), _tone(-30.0, 2.0)])
    results = feed(meter, signal)
    for prev, cur in zip(results, results[1:]):
        assert cur.max_momentary >= prev.max_momentary
        assert cur.max_short_term >= prev.max_short_term
        assert cur.max_true_peak >= prev.max_true_peak
        assert cur.lra >= 0.0


@pytest.mark.parametrize("channels", [1, 2, 6])
def test_full_scale_sine_true_peak(channels):
    meter = LoudnessMeter()
    tone = sine(1.0, amp=1.0)
    r = feed(meter, np.tile(tone, (channels, 1)))[-1]
    assert r.max_true_peak == pytest.approx(0.5, abs=1e-6)


def test_alternating_levels_have_loudness_range():
    segments = [_tone(-20.0 if i % 2 == 0 else -26.0, 3.0) for i in range(10)]
    r = feed(LoudnessMeter(), np.concatenate(segments))[-1]
    assert r.lra == pytest.approx(6.0, abs=0.1)

    steady = feed(LoudnessMeter(), _tone(-23.0, 30.0))[-1]
    assert steady.lra == pytest.approx(0.0, abs=1e-6)
