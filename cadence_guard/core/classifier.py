"""CadenceClassifier — stateless anomaly detection over a three-sample window.

Design principles:
    1. Pure function: accepts samples ordered newest → oldest, returns a
       Classification.  No side effects, no state, no I/O.
    2. Unusable windows are negative results, never exceptions.
    3. All thresholds are explicit and read-only once constructed.

Validation (first failure wins):
    - at least three samples                  → insufficient_data
    - every sample on the supported schema    → invalid_schema
    - newest sample has a source label        → invalid_payload
    - timestamps strictly decreasing          → ordering_violation
    - sequence numbers strictly decreasing    → ordering_violation
    - newest − oldest sequence ≤ max_gap      → ordering_violation

Classification priority (first match wins, one label only):
    1. STALLED        both intervals ≥ normal_interval × stall_multiplier
    2. TOO_SLOW       either interval ≥ max_interval
    3. TOO_FAST       either interval ≤ min_interval
    4. HIGH_VARIANCE  |interval1 − interval2| ≥ variance_threshold
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Sequence

from cadence_guard.domain.enums import AnomalyType, ClassificationRejection
from cadence_guard.domain.sample import Sample
from cadence_guard.domain.verdict import AnomalyVerdict, Classification

logger = logging.getLogger(__name__)

WINDOW_SIZE = 3


@dataclass(frozen=True)
class Thresholds:
    """Fixed classifier configuration, tuned for a ~12 second cadence."""

    normal_interval: int = 12
    max_interval: int = 60
    min_interval: int = 2
    variance_threshold: int = 25
    stall_multiplier: int = 3
    max_gap: int = 10

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.min_interval >= self.max_interval:
            raise ValueError("min_interval must be lower than max_interval")

    @property
    def stall_threshold(self) -> int:
        # Self-relative to the expected cadence
        return self.normal_interval * self.stall_multiplier

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        """(normal, max, min, variance, stall multiplier)."""
        return (
            self.normal_interval,
            self.max_interval,
            self.min_interval,
            self.variance_threshold,
            self.stall_multiplier,
        )


class CadenceClassifier:
    """Deterministic cadence classification.

    Safe to share between any number of concurrent callers.
    """

    def __init__(self, thresholds: Thresholds | None = None) -> None:
        self._thresholds = thresholds or Thresholds()

    @property
    def thresholds(self) -> Thresholds:
        return self._thresholds

    # ── Public API ───────────────────────────────────────────────────────

    def classify(self, window: Sequence[Sample]) -> Classification:
        """Classify the three newest samples of *window* (index 0 = newest)."""
        if len(window) < WINDOW_SIZE:
            return self._reject(ClassificationRejection.INSUFFICIENT_DATA, len(window))

        newest, middle, oldest = window[0], window[1], window[2]

        if not all(s.is_supported_version for s in (newest, middle, oldest)):
            return self._reject(ClassificationRejection.INVALID_SCHEMA, newest.sequence_number)

        if not newest.source_label:
            return self._reject(ClassificationRejection.INVALID_PAYLOAD, newest.sequence_number)

        # Also guarantees the interval subtraction below never goes negative
        if not (newest.timestamp > middle.timestamp > oldest.timestamp):
            return self._reject(ClassificationRejection.ORDERING_VIOLATION, newest.sequence_number)

        if not (newest.sequence_number > middle.sequence_number > oldest.sequence_number):
            return self._reject(ClassificationRejection.ORDERING_VIOLATION, newest.sequence_number)

        if newest.sequence_number - oldest.sequence_number > self._thresholds.max_gap:
            return self._reject(ClassificationRejection.ORDERING_VIOLATION, newest.sequence_number)

        interval1 = newest.timestamp - middle.timestamp
        interval2 = middle.timestamp - oldest.timestamp
        anomaly_type = self.label(interval1, interval2)

        if not anomaly_type.is_anomaly:
            return Classification.normal()

        logger.debug(
            "Window ending at %d classified %s (intervals %d/%d)",
            newest.sequence_number,
            anomaly_type.value,
            interval1,
            interval2,
        )
        return Classification.alert(
            AnomalyVerdict(
                anomaly_type=anomaly_type,
                interval1=interval1,
                interval2=interval2,
                source_label=newest.source_label,
                sequence_number=newest.sequence_number,
                observed_at=newest.timestamp,
            )
        )

    def label(self, interval1: int, interval2: int) -> AnomalyType:
        """Apply the fixed priority order to a pair of intervals."""
        t = self._thresholds
        stall = t.stall_threshold

        if interval1 >= stall and interval2 >= stall:
            return AnomalyType.STALLED
        if interval1 >= t.max_interval or interval2 >= t.max_interval:
            return AnomalyType.TOO_SLOW
        if interval1 <= t.min_interval or interval2 <= t.min_interval:
            return AnomalyType.TOO_FAST
        if abs(interval1 - interval2) >= t.variance_threshold:
            return AnomalyType.HIGH_VARIANCE
        return AnomalyType.NONE

    # ── Internals ────────────────────────────────────────────────────────

    @staticmethod
    def _reject(reason: ClassificationRejection, ref: int) -> Classification:
        logger.debug("Window rejected (%s) at %d", reason.value, ref)
        return Classification.rejected(reason)


def classify(window: Sequence[Sample], thresholds: Thresholds | None = None) -> Classification:
    """Convenience wrapper around a throwaway CadenceClassifier."""
    return CadenceClassifier(thresholds).classify(window)
