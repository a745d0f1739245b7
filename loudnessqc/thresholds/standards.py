from __future__ import annotations

from loudnessqc.types import LoudnessTarget

DEFAULT_STANDARD = "EBU_R128"

LOUDNESS_STANDARDS = {
    "EBU_R128": {
        "label": "EBU R128",
        "target_lufs": -23.0,
        "tolerance_lu": 1.0,
        "true_peak_limit_dbtp": -1.0,
        "max_lra_lu": 20.0,
        "description": "European Broadcasting Union standard for broadcast audio",
    },
    "ATSC_A85": {
        "label": "ATSC A/85",
        "target_lufs": -24.0,
        "tolerance_lu": 2.0,
        "true_peak_limit_dbtp": -2.0,
        "max_lra_lu": None,
        "description": "US broadcast standard for loudness and true-peak",
    },
    "STREAMING": {
        "label": "Streaming",
        "target_lufs": -14.0,
        "tolerance_lu": 1.0,
        "true_peak_limit_dbtp": -1.0,
        "max_lra_lu": None,
        "description": "Common target for streaming platforms",
    },
    "PODCAST": {
        "label": "Podcast",
        "target_lufs": -16.0,
        "tolerance_lu": 1.0,
        "true_peak_limit_dbtp": -1.0,
        "max_lra_lu": None,
        "description": "Common target for spoken-word podcasts",
    },
}


def _merge_config(base: dict, overrides: dict | None) -> dict:
    if not overrides:
        return base
    merged = {**base}
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _merge_config(base[key], value)
        else:
            merged[key] = value
    return merged


def get_standard(name: str) -> dict:
    """Return a copy of a named preset."""
    key = str(name).upper()
    if key not in LOUDNESS_STANDARDS:
        known = ", ".join(sorted(LOUDNESS_STANDARDS))
        raise ValueError(f"Unknown loudness standard: {name} (known: {known}).")
    return dict(LOUDNESS_STANDARDS[key])


def build_target(
    standard: str | None = DEFAULT_STANDARD,
    overrides: dict | None = None
) -> LoudnessTarget:
    """Return a LoudnessTarget from a preset with overrides applied."""
    if standard:
        name = str(standard).upper()
        base = get_standard(name)
    else:
        name = "CUSTOM"
        base = {**get_standard(DEFAULT_STANDARD), "label": "Custom", "description": "Custom loudness target"}
    cfg = _merge_config(base, overrides)
    max_lra = cfg.get("max_lra_lu")
    return LoudnessTarget(
        name=name,
        label=str(cfg["label"]),
        target_lufs=float(cfg["target_lufs"]),
        true_peak_limit_dbtp=float(cfg["true_peak_limit_dbtp"]),
        tolerance_lu=float(cfg["tolerance_lu"]),
        max_lra_lu=float(max_lra) if max_lra is not None else None,
        description=str(cfg.get("description", "")),
    )
