"""Session compliance analysis against a loudness standard."""
from __future__ import annotations
import math
from typing import Iterable

from loudnessqc.types import (
    ComplianceKind,
    ComplianceViolation,
    LoudnessResult,
    LoudnessTarget,
    Measurement,
    Status,
)

_FAIL_KINDS = {
    ComplianceKind.INTEGRATED_LOW,
    ComplianceKind.INTEGRATED_HIGH,
    ComplianceKind.TRUE_PEAK_EXCEEDED,
}


def analyze_compliance(
    result: LoudnessResult,
    measurements: Iterable[Measurement],
    target: LoudnessTarget
) -> list[ComplianceViolation]:
    """
    List every compliance violation of a finished session.

    Args:
        result: Final meter result of the session
        measurements: Recorded time series (used to locate true-peak overs)
        target: Standard to check against

    Returns:
        Violations, loudness first, then true peak, then LRA
    """
    violations: list[ComplianceViolation] = []
    tol = target.tolerance_lu
    integrated = result.integrated

    if math.isfinite(integrated):
        diff = integrated - target.target_lufs
        if abs(diff) > tol:
            low = diff < 0
            relation = "is below" if low else "exceeds"
            violations.append(
                ComplianceViolation(
                    timestamp=0.0,
                    kind=ComplianceKind.INTEGRATED_LOW if low else ComplianceKind.INTEGRATED_HIGH,
                    value=integrated,
                    threshold=target.target_lufs,
                    description=(
                        f"Integrated loudness {integrated:.1f} LUFS {relation} target "
                        f"{target.target_lufs:g} LUFS (tolerance: {tol:g} LU)"
                    ),
                )
            )

    limit = target.true_peak_limit_dbtp
    if result.max_true_peak > limit:
        overs = [m for m in measurements if m.true_peak > limit]
        if not overs:
            overs = [
                Measurement(
                    timestamp=0.0,
                    momentary=result.momentary,
                    short_term=result.short_term,
                    integrated=integrated,
                    true_peak=result.max_true_peak,
                    lra=result.lra,
                )
            ]
        for m in overs:
            violations.append(
                ComplianceViolation(
                    timestamp=m.timestamp,
                    kind=ComplianceKind.TRUE_PEAK_EXCEEDED,
                    value=m.true_peak,
                    threshold=limit,
                    description=f"True peak {m.true_peak:.1f} dBTP exceeds limit {limit:g} dBTP",
                )
            )

    if target.max_lra_lu is not None and result.lra > target.max_lra_lu:
        violations.append(
            ComplianceViolation(
                timestamp=0.0,
                kind=ComplianceKind.LRA_EXCEEDED,
                value=result.lra,
                threshold=target.max_lra_lu,
                description=(
                    f"Loudness range {result.lra:.1f} LU exceeds maximum "
                    f"{target.max_lra_lu:g} LU"
                ),
            )
        )
    return violations


def compliance_status(violations: Iterable[ComplianceViolation]) -> Status:
    """FAIL on loudness or true-peak violations, WARN on LRA only."""
    kinds = {v.kind for v in violations}
    if kinds & _FAIL_KINDS:
        return Status.FAIL
    if kinds:
        return Status.WARN
    return Status.PASS
