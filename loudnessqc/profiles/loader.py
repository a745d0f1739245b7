from __future__ import annotations
import json

from loudnessqc.profiles.validator import validate_meter_profile_dict
from loudnessqc.thresholds.standards import build_target
from loudnessqc.types import MeterProfile


def meter_profile_from_dict(j: dict) -> MeterProfile:
    """Validate a profile dict and build a MeterProfile from it."""
    validate_meter_profile_dict(j)
    alerts = j.get("alerts", {})
    meter = j.get("meter", {})
    weights = meter.get("channel_weights")
    return MeterProfile(
        name=j["profile"]["name"],
        version=str(j["profile"].get("version", "1.0")),
        target=build_target(j.get("standard"), j.get("target")),
        debounce_s=float(alerts.get("debounce_s", 2.0)),
        history_size=int(alerts.get("history_size", 10)),
        gated_history_blocks=int(meter.get("gated_history_blocks", 18000)),
        frame_ms=float(meter.get("frame_ms", 20.0)),
        channel_weights=tuple(float(w) for w in weights) if weights else None,
    )


def load_meter_profile(path: str) -> MeterProfile:
    """
    Load a meter profile from a JSON file.

    Args:
        path: Path to the meter profile JSON file

    Returns:
        MeterProfile with target, alert and meter settings
    """
    with open(path, "r", encoding="utf-8") as f:
        j = json.load(f)
    return meter_profile_from_dict(j)


def default_meter_profile(standard: str = "EBU_R128") -> MeterProfile:
    """Profile with default settings for a named standard."""
    return meter_profile_from_dict(
        {"profile": {"name": standard, "version": "1.0"}, "standard": standard}
    )
