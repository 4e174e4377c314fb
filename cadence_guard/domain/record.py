"""Aggregator-side models: persisted records, stats and submission results."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from cadence_guard.domain.enums import RejectReason
from cadence_guard.domain.verdict import AnomalyVerdict


class AnomalyRecord(AnomalyVerdict):
    """An accepted verdict, immutable once appended to the ledger."""

    record_id: int = Field(..., ge=1, description="Monotonically increasing ledger key")

    @classmethod
    def from_verdict(cls, record_id: int, verdict: AnomalyVerdict) -> "AnomalyRecord":
        return cls(record_id=record_id, **verdict.model_dump(exclude={"record_id"}))


class AggregatorStats(BaseModel):
    """Consistent snapshot of the aggregator counters."""

    total_anomalies: int = 0
    last_anomaly_sequence: int = 0
    last_anomaly_time: int = 0
    emergency_mode: bool = False

    model_config = {"frozen": True}


class SubmissionResult(BaseModel):
    """Typed outcome of a mutating aggregator call.

    Successful ``respond`` calls carry the new ``record_id``; admin calls
    succeed without one.  Failures carry a ``reason`` and never raise.
    """

    ok: bool
    record_id: Optional[int] = None
    reason: Optional[RejectReason] = None
    detail: str = ""

    model_config = {"frozen": True}

    @classmethod
    def accepted(cls, record_id: Optional[int] = None) -> "SubmissionResult":
        return cls(ok=True, record_id=record_id)

    @classmethod
    def rejected(cls, reason: RejectReason, detail: str = "") -> "SubmissionResult":
        return cls(ok=False, reason=reason, detail=detail)
