from __future__ import annotations

from loudnessqc.types import ViolationEvent, ViolationKind


_KIND_LABELS = {
    ViolationKind.PEAK: ("True peak", "dBTP", "above limit"),
    ViolationKind.LOUD: ("Integrated loudness", "LUFS", "above"),
    ViolationKind.QUIET: ("Integrated loudness", "LUFS", "below"),
}


def _format_alert_message(event: ViolationEvent) -> str:
    label, units, relation = _KIND_LABELS[event.kind]
    return (
        f"{label} {event.value:.1f} {units} is {relation} "
        f"{event.threshold:.1f} {units}."
    )


def build_alerts(events: list[ViolationEvent]) -> list[dict]:
    """Build alert list from live violation events."""
    alerts: list[dict] = []
    for event in events:
        alerts.append(
            {
                "kind": event.kind.value,
                "timestamp": event.timestamp,
                "value": event.value,
                "threshold": event.threshold,
                "status": "fail" if event.kind == ViolationKind.PEAK else "warn",
                "message": _format_alert_message(event),
            }
        )
    return alerts
