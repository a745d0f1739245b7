from __future__ import annotations

import json
import sys
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

FS = 48000


def amplitude_for_lufs(lufs: float) -> float:
    """Amplitude of a mono 1 kHz sine that reads ``lufs``."""
    return float(10.0 ** ((lufs + 3.0103) / 20.0))


def sine(
    duration_s: float,
    *,
    amp: float = 1.0,
    freq_hz: float = 1000.0,
    fs: int = FS
) -> np.ndarray:
    t = np.arange(int(round(duration_s * fs))) / fs
    return amp * np.sin(2.0 * np.pi * freq_hz * t)


def feed(meter, signal: np.ndarray, fs: float = FS, frame_size: int = 960) -> list:
    """Push a (channels, samples) or mono signal through a meter in frames."""
    x = np.atleast_2d(np.asarray(signal, dtype=np.float64))
    results = []
    for start in range(0, x.shape[1], frame_size):
        results.append(meter.process(x[:, start:start + frame_size], fs))
    return results


def build_profile_dict(
    *,
    standard: str | None = "EBU_R128",
    target: dict | None = None,
    alerts: dict | None = None,
    meter: dict | None = None
) -> dict:
    j: dict = {"profile": {"name": "test_profile", "version": "1.0"}}
    if standard is not None:
        j["standard"] = standard
    if target is not None:
        j["target"] = target
    j["alerts"] = alerts if alerts is not None else {"debounce_s": 2.0, "history_size": 10}
    j["meter"] = meter if meter is not None else {"gated_history_blocks": 18000, "frame_ms": 20.0}
    return j


def write_profile(tmp_path: Path, profile: dict) -> Path:
    path = tmp_path / "meter.profile.json"
    path.write_text(json.dumps(profile), encoding="utf-8")
    return path
