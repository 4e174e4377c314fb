"""Structured notifications emitted by the aggregator.

Each event is a frozen model with an ``event`` tag so sinks can serialise
them without knowing the concrete class.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, Field

from cadence_guard.domain.record import AnomalyRecord
from cadence_guard.foundation.clock import utc_now


class AnomalyRecorded(BaseModel):
    """An accepted submission, with its human-readable description."""

    event: Literal["anomaly_recorded"] = "anomaly_recorded"
    record: AnomalyRecord
    description: str

    model_config = {"frozen": True}


class EmergencyModeChanged(BaseModel):
    """The emergency flag flipped."""

    event: Literal["emergency_mode_changed"] = "emergency_mode_changed"
    emergency_mode: bool
    reason: str
    timestamp: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class SourceAuthorizationChanged(BaseModel):
    """A source was granted or lost permission to submit."""

    event: Literal["source_authorization_changed"] = "source_authorization_changed"
    source: str
    authorized: bool

    model_config = {"frozen": True}


Notification = Union[AnomalyRecorded, EmergencyModeChanged, SourceAuthorizationChanged]
