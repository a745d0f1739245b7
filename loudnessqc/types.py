from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import numpy as np

NEG_INF = float("-inf")


class Status(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class ViolationKind(str, Enum):
    PEAK = "PEAK"
    LOUD = "LOUD"
    QUIET = "QUIET"


class ComplianceKind(str, Enum):
    INTEGRATED_LOW = "INTEGRATED_LOW"
    INTEGRATED_HIGH = "INTEGRATED_HIGH"
    TRUE_PEAK_EXCEEDED = "TRUE_PEAK_EXCEEDED"
    LRA_EXCEEDED = "LRA_EXCEEDED"


@dataclass(frozen=True)
class AudioBuffer:
    samples: np.ndarray
    fs: float
    duration: float
    channels: int = 1
    backend: str = "unknown"
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LoudnessResult:
    """Snapshot of one processing call. Undefined values are -inf."""
    momentary: float = NEG_INF
    short_term: float = NEG_INF
    integrated: float = NEG_INF
    true_peak: float = NEG_INF
    lra: float = 0.0
    max_momentary: float = NEG_INF
    max_short_term: float = NEG_INF
    max_true_peak: float = NEG_INF


@dataclass(frozen=True)
class ViolationEvent:
    kind: ViolationKind
    value: float
    threshold: float
    timestamp: float


@dataclass(frozen=True)
class LoudnessTarget:
    name: str
    label: str
    target_lufs: float
    true_peak_limit_dbtp: float
    tolerance_lu: float
    max_lra_lu: float | None = None
    description: str = ""


@dataclass(frozen=True)
class Measurement:
    timestamp: float
    momentary: float
    short_term: float
    integrated: float
    true_peak: float
    lra: float


@dataclass(frozen=True)
class ComplianceViolation:
    timestamp: float
    kind: ComplianceKind
    value: float
    threshold: float
    description: str


@dataclass(frozen=True)
class MeterProfile:
    name: str
    version: str
    target: LoudnessTarget
    debounce_s: float = 2.0
    history_size: int = 10
    gated_history_blocks: int = 18000
    frame_ms: float = 20.0
    channel_weights: tuple[float, ...] | None = None
