"""Meter profile validation helpers."""
from __future__ import annotations
from typing import Any
import math

from loudnessqc.thresholds.standards import LOUDNESS_STANDARDS

_TARGET_NUMBERS = ("target_lufs", "tolerance_lu", "true_peak_limit_dbtp")


def _is_number(v: Any) -> bool:
    return (
        isinstance(v, (int, float))
        and not isinstance(v, bool)
        and not math.isnan(v)
        and not math.isinf(v)
    )


def validate_meter_profile_dict(j: dict) -> None:
    """Validate meter profile structure and value ranges."""
    errors: list[str] = []

    def err(msg: str) -> None:
        errors.append(msg)

    if not isinstance(j, dict):
        raise ValueError("profile must be a JSON object.")

    if "profile" not in j:
        err("missing key: profile")
    else:
        meta = j["profile"]
        if not isinstance(meta, dict) or not isinstance(meta.get("name"), str) or not meta.get("name"):
            err("profile.name must be a non-empty string.")

    standard = j.get("standard")
    if standard is not None and str(standard).upper() not in LOUDNESS_STANDARDS:
        err(f"standard must be one of {', '.join(sorted(LOUDNESS_STANDARDS))}.")

    target = j.get("target", {})
    if not isinstance(target, dict):
        err("target must be an object.")
        target = {}
    if standard is None:
        for k in _TARGET_NUMBERS:
            if k not in target:
                err(f"target.{k} required when no standard is given.")
    for k in _TARGET_NUMBERS:
        if k in target and not _is_number(target[k]):
            err(f"target.{k} must be a finite number.")
    if _is_number(target.get("tolerance_lu")) and target["tolerance_lu"] < 0:
        err("target.tolerance_lu must be >= 0.")
    max_lra = target.get("max_lra_lu")
    if max_lra is not None and (not _is_number(max_lra) or max_lra <= 0):
        err("target.max_lra_lu must be a positive number or null.")

    alerts = j.get("alerts", {})
    if not isinstance(alerts, dict):
        err("alerts must be an object.")
        alerts = {}
    debounce = alerts.get("debounce_s", 2.0)
    if not _is_number(debounce) or debounce < 0:
        err("alerts.debounce_s must be a non-negative number.")
    history_size = alerts.get("history_size", 10)
    if not isinstance(history_size, int) or isinstance(history_size, bool) or history_size <= 0:
        err("alerts.history_size must be a positive int.")

    meter = j.get("meter", {})
    if not isinstance(meter, dict):
        err("meter must be an object.")
        meter = {}
    blocks = meter.get("gated_history_blocks", 18000)
    if not isinstance(blocks, int) or isinstance(blocks, bool) or blocks <= 0:
        err("meter.gated_history_blocks must be a positive int.")
    frame_ms = meter.get("frame_ms", 20.0)
    if not _is_number(frame_ms) or frame_ms <= 0:
        err("meter.frame_ms must be > 0.")
    weights = meter.get("channel_weights")
    if weights is not None:
        if not isinstance(weights, list) or not weights:
            err("meter.channel_weights must be a non-empty list.")
        else:
            for i, w in enumerate(weights):
                if not _is_number(w) or w < 0:
                    err(f"meter.channel_weights[{i}] must be a non-negative number.")
                    break

    if errors:
        raise ValueError("; ".join(errors))
