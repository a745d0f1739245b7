from __future__ import annotations

import numpy as np
import pytest
import soundfile as sf

from loudnessqc.io.audio import frame_size_for, iter_frames, load_audio
from loudnessqc.types import AudioBuffer


def test_load_audio_keeps_channels(tmp_path):
    fs = 48000
    t = np.arange(0, 0.1, 1.0 / fs)
    left = 0.1 * np.sin(2.0 * np.pi * 440.0 * t)
    stereo = np.stack([left, left * 0.5], axis=1)
    path = tmp_path / "tone.wav"
    sf.write(path, stereo, fs, subtype="FLOAT")

    audio = load_audio(str(path))
    assert audio.channels == 2
    assert audio.fs == 48000.0
    assert audio.backend == "soundfile"
    assert audio.samples.shape == (len(t), 2)
    assert audio.duration == pytest.approx(0.1, abs=1.0 / fs)
    assert np.allclose(audio.samples[:, 1], left * 0.5, atol=1e-6)


def test_load_audio_rejects_garbage(tmp_path):
    path = tmp_path / "noise.wav"
    path.write_bytes(b"not audio at all")
    with pytest.raises(ValueError):
        load_audio(str(path))


def test_iter_frames_shapes():
    samples = np.arange(10, dtype=np.float64).reshape(5, 2)
    audio = AudioBuffer(samples=samples, fs=10.0, duration=0.5, channels=2, backend="test")
    frames = list(iter_frames(audio, 2))
    assert [start for start, _ in frames] == [0.0, 0.2, 0.4]
    assert frames[0][1].shape == (2, 2)
    assert frames[-1][1].shape == (2, 1)
    assert np.array_equal(frames[0][1], [[0.0, 2.0], [1.0, 3.0]])
    with pytest.raises(ValueError):
        list(iter_frames(audio, 0))


def test_frame_size_for():
    assert frame_size_for(48000, 20.0) == 960
    assert frame_size_for(44100, 20.0) == 882
    assert frame_size_for(8, 1.0) == 1
