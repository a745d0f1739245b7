from __future__ import annotations
from dataclasses import asdict

from loudnessqc.reporting.alerts import build_alerts
from loudnessqc.types import (
    ComplianceViolation,
    LoudnessResult,
    LoudnessTarget,
    Measurement,
    Status,
    ViolationEvent,
)
from loudnessqc.utils.canonical_json import json_safe
from loudnessqc.utils.hashing import sha256_hex_canonical_json
from loudnessqc.utils.quantize import q, q_db


def _series_entry(m: Measurement) -> dict:
    return {
        "t": q(m.timestamp, 0.001),
        "momentary_lufs": q_db(m.momentary),
        "short_term_lufs": q_db(m.short_term),
        "integrated_lufs": q_db(m.integrated),
        "true_peak_dbtp": q_db(m.true_peak),
        "lra_lu": q_db(m.lra),
    }


def _violation_entry(v: ComplianceViolation) -> dict:
    return {
        "timestamp": q(v.timestamp, 0.001),
        "type": v.kind.value,
        "value": q_db(v.value),
        "threshold": q_db(v.threshold),
        "description": v.description,
    }


def build_loudness_report_dict(
    *,
    engine: dict,
    input_meta: dict,
    session: dict,
    target: LoudnessTarget,
    result: LoudnessResult,
    measurements: list[Measurement],
    violations: list[ComplianceViolation],
    events: list[ViolationEvent],
    status: Status
) -> dict:
    """
    Build a loudness compliance report with quantized values and an integrity hash.

    Args:
        engine: Engine metadata (name, version, build info)
        input_meta: Input file metadata
        session: Session metadata (report_id, created_utc, duration_s, ...)
        target: Standard the session was checked against
        result: Final meter result
        measurements: Recorded time series
        violations: Compliance violations from analyze_compliance
        events: Live violation events fired while measuring
        status: Overall compliance status

    Returns:
        JSON-serialisable report dict; non-finite readings are None
    """
    report = {
        "schema_version": "1.0",
        "report_id": session.get("report_id", "loudness_local"),
        "created_utc": session.get("created_utc", "1970-01-01T00:00:00Z"),
        "engine": engine,
        "input": input_meta,
        "session": session,
        "standard": asdict(target),
        "measurements": {
            "integrated_lufs": q_db(result.integrated),
            "loudness_range_lu": q_db(result.lra),
            "max_true_peak_dbtp": q_db(result.max_true_peak),
            "max_momentary_lufs": q_db(result.max_momentary),
            "max_short_term_lufs": q_db(result.max_short_term),
            "momentary_lufs": q_db(result.momentary),
            "short_term_lufs": q_db(result.short_term),
            "true_peak_dbtp": q_db(result.true_peak),
        },
        "series": [_series_entry(m) for m in measurements],
        "violations": [_violation_entry(v) for v in violations],
        "alerts": [
            {**a, "value": q_db(a["value"]), "threshold": q_db(a["threshold"])}
            for a in build_alerts(events)
        ],
        "compliance": {
            "status": status.value,
            "compliant": not violations,
            "violation_count": len(violations),
        },
        "integrity": {
            "report_hash_sha256": "",
        },
    }
    report = json_safe(report)

    # Hash everything except the integrity object itself
    tmp = dict(report)
    tmp.pop("integrity", None)
    report["integrity"]["report_hash_sha256"] = sha256_hex_canonical_json(tmp)
    return report
