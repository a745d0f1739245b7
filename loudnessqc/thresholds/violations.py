"""Debounced live violation detection against a loudness target."""
from __future__ import annotations
from collections import deque
import logging
import math
import time
from typing import Callable

from loudnessqc.types import LoudnessResult, LoudnessTarget, ViolationEvent, ViolationKind

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_S = 2.0
QUIET_DEBOUNCE_FACTOR = 5.0
QUIET_MARGIN_LU = 3.0
DEFAULT_HISTORY_SIZE = 10


class ViolationMonitor:
    """
    Compare each result against a target and emit violation events.

    PEAK, LOUD and QUIET are debounced independently: a kind fires only if
    more than its interval has passed since it last fired. QUIET uses five
    times the base interval and an extra 3 LU margin so that a short,
    still-settling integrated value does not raise it.
    """

    def __init__(
        self,
        target: LoudnessTarget,
        *,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        history_size: int = DEFAULT_HISTORY_SIZE,
        clock: Callable[[], float] = time.time,
        on_violation: Callable[[ViolationEvent], None] | None = None
    ):
        if debounce_s < 0:
            raise ValueError("debounce_s must be non-negative.")
        if history_size <= 0:
            raise ValueError("history_size must be positive.")
        self.target = target
        self.debounce_s = float(debounce_s)
        self.clock = clock
        self.on_violation = on_violation
        self._events: deque[ViolationEvent] = deque(maxlen=int(history_size))
        self._last_fired: dict[ViolationKind, float] = {}

    @property
    def loud_threshold(self) -> float:
        return self.target.target_lufs + self.target.tolerance_lu

    @property
    def quiet_threshold(self) -> float:
        return self.target.target_lufs - self.target.tolerance_lu - QUIET_MARGIN_LU

    @property
    def violations(self) -> list[ViolationEvent]:
        """Retained events, oldest first."""
        return list(self._events)

    def interval_for(self, kind: ViolationKind) -> float:
        if kind == ViolationKind.QUIET:
            return self.debounce_s * QUIET_DEBOUNCE_FACTOR
        return self.debounce_s

    def check(self, result: LoudnessResult, now: float | None = None) -> list[ViolationEvent]:
        """Return the events fired by this result (at most one per kind)."""
        now = self.clock() if now is None else float(now)
        fired: list[ViolationEvent] = []

        if result.true_peak > self.target.true_peak_limit_dbtp:
            self._maybe_fire(
                ViolationKind.PEAK, result.true_peak,
                self.target.true_peak_limit_dbtp, now, fired,
            )
        if math.isfinite(result.integrated):
            if result.integrated > self.loud_threshold:
                self._maybe_fire(
                    ViolationKind.LOUD, result.integrated,
                    self.loud_threshold, now, fired,
                )
            if result.integrated < self.quiet_threshold:
                self._maybe_fire(
                    ViolationKind.QUIET, result.integrated,
                    self.quiet_threshold, now, fired,
                )
        return fired

    def dismiss(self, timestamp: float) -> int:
        """Drop retained events with this timestamp; returns how many were removed."""
        kept = [e for e in self._events if e.timestamp != timestamp]
        removed = len(self._events) - len(kept)
        self._events.clear()
        self._events.extend(kept)
        return removed

    def reset(self) -> None:
        self._events.clear()
        self._last_fired.clear()

    def _maybe_fire(
        self,
        kind: ViolationKind,
        value: float,
        threshold: float,
        now: float,
        fired: list[ViolationEvent]
    ) -> None:
        last = self._last_fired.get(kind)
        if last is not None and now - last <= self.interval_for(kind):
            return
        self._last_fired[kind] = now
        event = ViolationEvent(kind=kind, value=value, threshold=threshold, timestamp=now)
        self._events.append(event)
        fired.append(event)
        logger.info(
            "%s violation: %.2f vs threshold %.2f", kind.value, value, threshold
        )
        if self.on_violation is not None:
            self.on_violation(event)
