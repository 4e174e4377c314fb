"""Emergency-entry rule — a pure function of a verdict's type and intervals."""

from __future__ import annotations

from dataclasses import dataclass

from cadence_guard.domain.enums import AnomalyType
from cadence_guard.domain.verdict import AnomalyVerdict


@dataclass(frozen=True)
class EmergencyRules:
    """Interval limits beyond which an anomaly escalates to emergency."""

    slow_interval: int = 120
    fast_interval: int = 1

    def requires_emergency(self, verdict: AnomalyVerdict) -> bool:
        """Return True if *verdict* alone justifies entering emergency mode.

        HIGH_VARIANCE never escalates by itself; STALLED always does.
        """
        kind = verdict.anomaly_type
        if kind == AnomalyType.STALLED:
            return True
        if kind == AnomalyType.TOO_SLOW:
            return verdict.interval1 >= self.slow_interval or verdict.interval2 >= self.slow_interval
        if kind == AnomalyType.TOO_FAST:
            return verdict.interval1 <= self.fast_interval or verdict.interval2 <= self.fast_interval
        return False
