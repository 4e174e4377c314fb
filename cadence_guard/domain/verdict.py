"""AnomalyVerdict — the classifier's conclusion about one window.

A verdict is tagged by ``anomaly_type`` and carries the metrics that led to
it, so the label never travels without its intervals.  Validation here is
structural only (non-negative integers, known labels); the aggregator
applies its own acceptance rules on top.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from cadence_guard.domain.enums import AnomalyType, ClassificationRejection


class AnomalyVerdict(BaseModel):
    """A classified cadence deviation for the newest sample of a window."""

    anomaly_type: AnomalyType = Field(..., description="Highest-priority matching rule")
    interval1: int = Field(..., ge=0, description="Seconds between newest and middle sample")
    interval2: int = Field(..., ge=0, description="Seconds between middle and oldest sample")
    source_label: str = Field(..., max_length=256)
    sequence_number: int = Field(..., ge=0, description="Sequence number of the newest sample")
    observed_at: int = Field(..., ge=0, description="Timestamp of the newest sample")

    model_config = {"frozen": True}


class Classification(BaseModel):
    """Outcome of classifying one window.

    ``accept`` is False when the window is unusable; ``verdict`` is only
    present for an actual anomaly.  A normal window is ``accept=True`` with
    no verdict.
    """

    accept: bool
    verdict: Optional[AnomalyVerdict] = None
    rejection: Optional[ClassificationRejection] = None

    model_config = {"frozen": True}

    @property
    def is_alert(self) -> bool:
        return self.accept and self.verdict is not None

    @classmethod
    def rejected(cls, reason: ClassificationRejection) -> "Classification":
        return cls(accept=False, rejection=reason)

    @classmethod
    def normal(cls) -> "Classification":
        return cls(accept=True)

    @classmethod
    def alert(cls, verdict: AnomalyVerdict) -> "Classification":
        return cls(accept=True, verdict=verdict)
