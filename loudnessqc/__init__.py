"""
LoudnessQC - Loudness Quality Control Tool

Streaming EBU R128 / ITU-R BS.1770-4 loudness metering with compliance checks.
"""
from loudnessqc.version import __version__
from loudnessqc.types import (
    Status,
    ViolationKind,
    ComplianceKind,
    AudioBuffer,
    LoudnessResult,
    ViolationEvent,
    LoudnessTarget,
    Measurement,
    ComplianceViolation,
    MeterProfile,
)
from loudnessqc.meter import LoudnessMeter
from loudnessqc.thresholds.standards import LOUDNESS_STANDARDS, build_target
from loudnessqc.thresholds.violations import ViolationMonitor

__all__ = [
    "__version__",
    "Status",
    "ViolationKind",
    "ComplianceKind",
    "AudioBuffer",
    "LoudnessResult",
    "ViolationEvent",
    "LoudnessTarget",
    "Measurement",
    "ComplianceViolation",
    "MeterProfile",
    "LoudnessMeter",
    "LOUDNESS_STANDARDS",
    "build_target",
    "ViolationMonitor",
]
