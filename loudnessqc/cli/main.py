"""LoudnessQC CLI - loudness compliance measurement."""
from __future__ import annotations
import argparse
import json
import logging
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

import numpy as np
import scipy

from loudnessqc.version import __version__
from loudnessqc.io.audio import frame_size_for, iter_frames, load_audio
from loudnessqc.meter import LoudnessMeter
from loudnessqc.profiles.loader import default_meter_profile, load_meter_profile
from loudnessqc.reporting.history import MeasurementHistory
from loudnessqc.reporting.report import build_loudness_report_dict
from loudnessqc.thresholds.compliance import analyze_compliance, compliance_status
from loudnessqc.thresholds.standards import LOUDNESS_STANDARDS
from loudnessqc.thresholds.violations import ViolationMonitor
from loudnessqc.types import MeterProfile, Status
from loudnessqc.utils.hashing import sha256_hex_file

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_WARN = 10
EXIT_FAIL = 20
EXIT_BAD_ARGS = 2
EXIT_DECODE_ERROR = 3
EXIT_PROFILE_ERROR = 4
EXIT_INTERNAL_ERROR = 5
SERIES_INTERVAL_S = 0.1


def _exit_code_for_status(status: Status) -> int:
    """Map Status enum to exit code."""
    if status == Status.PASS:
        return EXIT_PASS
    if status == Status.WARN:
        return EXIT_WARN
    return EXIT_FAIL


def _build_engine_meta() -> dict:
    """Build engine metadata for the report."""
    return {
        "name": "loudnessqc",
        "version": __version__,
        "build": {
            "platform": platform.platform(),
            "python": platform.python_version(),
            "deps": [
                {"name": "numpy", "version": np.__version__},
                {"name": "scipy", "version": scipy.__version__},
            ],
        },
    }


def _build_input_meta(audio_path: str, audio) -> dict:
    """Build input metadata for the report."""
    return {
        "path": str(Path(audio_path).resolve()),
        "file_hash_sha256": sha256_hex_file(audio_path),
        "fs_hz": audio.fs,
        "channels": int(audio.channels),
        "duration_s": audio.duration,
        "decode_backend": audio.backend,
        "decode_warnings": list(audio.warnings),
    }


def _resolve_profile(args) -> MeterProfile:
    if getattr(args, "profile", None):
        return load_meter_profile(args.profile)
    return default_meter_profile(getattr(args, "standard", None) or "EBU_R128")


def _measure_audio(audio_path: str, profile: MeterProfile):
    """Run a file through the meter and build the compliance report."""
    audio = load_audio(audio_path)
    meter = LoudnessMeter(
        gated_history_blocks=profile.gated_history_blocks,
        channel_weights=profile.channel_weights,
    )
    monitor = ViolationMonitor(
        profile.target,
        debounce_s=profile.debounce_s,
        history_size=profile.history_size,
    )
    history = MeasurementHistory(interval_s=SERIES_INTERVAL_S)
    events = []

    frame_size = frame_size_for(audio.fs, profile.frame_ms)
    for start, frame in iter_frames(audio, frame_size):
        result = meter.process(frame, audio.fs)
        # Timestamps are media time at the end of the frame.
        t = start + frame.shape[1] / audio.fs
        history.record(result, t)
        events.extend(monitor.check(result, now=t))

    result = meter.result
    measurements = history.measurements()
    violations = analyze_compliance(result, measurements, profile.target)
    status = compliance_status(violations)
    session = {
        "report_id": f"loudness_{uuid4().hex[:12]}",
        "created_utc": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "profile_name": profile.name,
        "profile_version": profile.version,
        "duration_s": audio.duration,
        "frame_ms": profile.frame_ms,
        "blocks": meter.block_count,
    }
    report = build_loudness_report_dict(
        engine=_build_engine_meta(),
        input_meta=_build_input_meta(audio_path, audio),
        session=session,
        target=profile.target,
        result=result,
        measurements=measurements,
        violations=violations,
        events=events,
        status=status,
    )
    return report, status, result


def _fmt(value: float) -> str:
    return f"{value:.1f}" if np.isfinite(value) else "-inf"


def cmd_measure(args) -> int:
    """Handle measure command."""
    try:
        profile = _resolve_profile(args)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        print(f"Error: Invalid profile - {e}", file=sys.stderr)
        return EXIT_PROFILE_ERROR
    try:
        report, status, _ = _measure_audio(args.audio_path, profile)
    except FileNotFoundError as e:
        print(f"Error: File not found - {e}", file=sys.stderr)
        return EXIT_DECODE_ERROR
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DECODE_ERROR
    except Exception as e:
        logger.exception("measure failed")
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR

    output_json = json.dumps(report, indent=2)
    if args.out:
        Path(args.out).write_text(output_json, encoding="utf-8")
        print(f"Report written to: {args.out}", file=sys.stderr)
    else:
        print(output_json)
    return _exit_code_for_status(status)


def cmd_validate(args) -> int:
    """Handle validate command."""
    try:
        profile = _resolve_profile(args)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        print(f"Error: Invalid profile - {e}", file=sys.stderr)
        return EXIT_PROFILE_ERROR
    try:
        _, status, result = _measure_audio(args.audio_path, profile)
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DECODE_ERROR
    except Exception as e:
        logger.exception("validate failed")
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR

    print(
        f"{status.value.upper()} [{profile.target.label}] "
        f"I={_fmt(result.integrated)} LUFS "
        f"LRA={_fmt(result.lra)} LU "
        f"TPmax={_fmt(result.max_true_peak)} dBTP"
    )
    code = _exit_code_for_status(status)
    if args.fail_on == "fail" and code == EXIT_WARN:
        return EXIT_PASS
    return code


def cmd_standards(args) -> int:
    """Handle standards command."""
    for key in sorted(LOUDNESS_STANDARDS):
        s = LOUDNESS_STANDARDS[key]
        max_lra = s["max_lra_lu"]
        lra_txt = f", max LRA {max_lra:g} LU" if max_lra is not None else ""
        print(
            f"{key:<10} {s['label']:<10} {s['target_lufs']:g} LUFS "
            f"(+/-{s['tolerance_lu']:g} LU), TP {s['true_peak_limit_dbtp']:g} dBTP{lra_txt}"
        )
    return EXIT_PASS


def _add_target_args(p: argparse.ArgumentParser) -> None:
    group = p.add_mutually_exclusive_group()
    group.add_argument(
        "--standard", "-s",
        choices=sorted(LOUDNESS_STANDARDS),
        default="EBU_R128",
        help="Loudness standard preset (default: EBU_R128)"
    )
    group.add_argument(
        "--profile", "-p",
        help="Path to meter profile JSON"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loudnessqc",
        description="EBU R128 / ITU-R BS.1770 loudness measurement and compliance checks"
    )
    parser.add_argument(
        "--version", action="version",
        version=f"loudnessqc {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging on stderr"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    measure_parser = subparsers.add_parser(
        "measure",
        help="Measure an audio file and write a loudness report"
    )
    measure_parser.add_argument("audio_path", help="Path to audio file")
    _add_target_args(measure_parser)
    measure_parser.add_argument(
        "--out", "-o",
        help="Output path for report JSON"
    )
    measure_parser.set_defaults(func=cmd_measure)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check an audio file against a standard (one-line output)"
    )
    validate_parser.add_argument("audio_path", help="Path to audio file")
    _add_target_args(validate_parser)
    validate_parser.add_argument(
        "--fail-on",
        choices=["fail", "warn"],
        default="fail",
        help="When to return non-zero exit code (default: fail)"
    )
    validate_parser.set_defaults(func=cmd_validate)

    standards_parser = subparsers.add_parser(
        "standards",
        help="List loudness standard presets"
    )
    standards_parser.set_defaults(func=cmd_standards)
    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()
        sys.exit(EXIT_BAD_ARGS)


if __name__ == "__main__":
    main()
