"""Audio I/O module."""
from __future__ import annotations
from typing import Iterator
import warnings as py_warnings

import numpy as np

from loudnessqc.types import AudioBuffer


def _decode_soundfile(path: str) -> tuple[np.ndarray, float, list[str]]:
    """Decode using soundfile (libsndfile) into a (frames, channels) array."""
    try:
        import soundfile as sf
    except ImportError as exc:
        raise RuntimeError("soundfile backend not available.") from exc

    with py_warnings.catch_warnings(record=True) as w:
        py_warnings.simplefilter("always")
        try:
            data, fs = sf.read(path, always_2d=True, dtype="float64")
        except RuntimeError as exc:
            raise ValueError(f"Could not decode {path}: {exc}") from exc
    warn_list = [str(wi.message) for wi in w]
    return data, float(fs), warn_list


def load_audio(path: str) -> AudioBuffer:
    """
    Load an audio file keeping every channel.

    Supports the formats libsndfile reads (WAV, FLAC, AIFF, OGG, ...).
    Samples are float64 with shape (frames, channels).
    """
    data, fs, warn_list = _decode_soundfile(path)
    if data.ndim != 2 or data.shape[1] == 0:
        raise ValueError("Decoded audio has no channels.")
    return AudioBuffer(
        samples=data,
        fs=fs,
        duration=data.shape[0] / fs if fs > 0 else 0.0,
        channels=int(data.shape[1]),
        backend="soundfile",
        warnings=warn_list,
    )


def frame_size_for(fs: float, frame_ms: float) -> int:
    """Samples per processing frame."""
    return max(1, int(round(fs * frame_ms / 1000.0)))


def iter_frames(audio: AudioBuffer, frame_size: int) -> Iterator[tuple[float, np.ndarray]]:
    """
    Yield (start_time_s, frame) pairs, frame shaped (channels, samples).

    The final frame may be shorter than ``frame_size``.
    """
    if frame_size <= 0:
        raise ValueError("frame_size must be positive.")
    x = np.asarray(audio.samples, dtype=np.float32)
    if x.ndim == 1:
        x = x[:, None]
    for start in range(0, x.shape[0], frame_size):
        chunk = x[start:start + frame_size]
        yield start / audio.fs, np.ascontiguousarray(chunk.T)
