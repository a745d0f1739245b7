#!/usr/bin/env python
"""
Synthesize loudness test vectors for LoudnessQC validation.

Writes float WAV files with known BS.1770 loudness. A full-scale 1 kHz sine
in one channel reads -3.01 LUFS, so a sine of amplitude A reads
20*log10(A) - 3.01 per channel.
"""
from __future__ import annotations
from pathlib import Path

import numpy as np
import soundfile as sf

FS = 48000
SINE_OFFSET_LU = -3.0103


def amplitude_for_lufs(lufs: float, channels: int = 1) -> float:
    """Sine amplitude per channel that reads ``lufs`` with ``channels`` equal channels."""
    per_channel = lufs - 10.0 * np.log10(channels)
    return float(10.0 ** ((per_channel - SINE_OFFSET_LU) / 20.0))


def gen_sine(freq_hz: float, duration_s: float, fs: int, amp: float = 1.0) -> np.ndarray:
    """Generate a sine wave."""
    t = np.arange(int(round(duration_s * fs))) / fs
    return amp * np.sin(2.0 * np.pi * freq_hz * t)


def write_vector(path: Path, channels: list[np.ndarray], fs: int = FS) -> None:
    """Write equal-length channels as a 32-bit float WAV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = np.stack(channels, axis=1).astype(np.float32)
    sf.write(str(path), data, fs, subtype="FLOAT")
    print(f"  Created: {path}")


def main():
    """Generate all test vectors."""
    base_dir = Path(__file__).parent.parent / "validation" / "vectors"
    print("Generating loudness vectors...")

    # v1: stereo 1 kHz at -23 LUFS (EBU Tech 3341 style)
    amp = amplitude_for_lufs(-23.0, channels=2)
    tone = gen_sine(1000.0, 20.0, FS, amp)
    write_vector(base_dir / "v0001_stereo_1khz_-23lufs.wav", [tone, tone])

    # v2: 10 s silence then 20 s mono tone at -20 LUFS
    tone = gen_sine(1000.0, 20.0, FS, amplitude_for_lufs(-20.0))
    mono = np.concatenate([np.zeros(10 * FS), tone])
    write_vector(base_dir / "v0002_silence_then_-20lufs.wav", [mono])

    # v3: alternating 3 s segments at -20 and -26 LUFS (LRA ~ 6 LU)
    segments = []
    for i in range(10):
        lufs = -20.0 if i % 2 == 0 else -26.0
        segments.append(gen_sine(1000.0, 3.0, FS, amplitude_for_lufs(lufs)))
    write_vector(base_dir / "v0003_alternating_-20_-26lufs.wav", [np.concatenate(segments)])

    # v4: full-scale 997 Hz sine for true-peak checks
    write_vector(base_dir / "v0004_fullscale_997hz.wav", [gen_sine(997.0, 5.0, FS, 1.0)])

    print(f"\nGenerated 4 test vectors in: {base_dir}")


if __name__ == "__main__":
    main()
