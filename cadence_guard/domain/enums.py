"""Controlled enumerations for the cadence-guard domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum

SUPPORTED_SCHEMA_VERSION = 1


class AnomalyType(str, Enum):
    """Cadence anomaly labels, mutually exclusive per evaluation."""

    NONE = "none"
    TOO_SLOW = "too_slow"
    TOO_FAST = "too_fast"
    HIGH_VARIANCE = "high_variance"
    STALLED = "stalled"

    @property
    def is_anomaly(self) -> bool:
        return self is not AnomalyType.NONE


class ClassificationRejection(str, Enum):
    """Why a window could not be classified.  Never alerting."""

    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_SCHEMA = "invalid_schema"
    INVALID_PAYLOAD = "invalid_payload"
    ORDERING_VIOLATION = "ordering_violation"


class RejectReason(str, Enum):
    """Why the aggregator refused a submission or an admin call."""

    UNAUTHORIZED = "unauthorized"
    INVALID_PAYLOAD = "invalid_payload"


class HealthState(str, Enum):
    """Emergency flag states."""

    HEALTHY = "healthy"
    EMERGENCY = "emergency"


ANOMALY_DESCRIPTIONS: dict[AnomalyType, str] = {
    AnomalyType.TOO_SLOW: "Block production is slower than expected",
    AnomalyType.TOO_FAST: "Block production is faster than expected",
    AnomalyType.HIGH_VARIANCE: "Block intervals are highly inconsistent",
    AnomalyType.STALLED: "Block production appears to be stalled",
}

NO_ANOMALY_DESCRIPTION = "No anomaly detected"
