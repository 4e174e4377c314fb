"""Sample — one observation of the timing source.

The model is intentionally permissive about ``schema_version`` and
``source_label``: an unsupported version or an empty label is a *negative
classification*, not a construction error, so those checks live in the
classifier.  Counters can never be negative.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from cadence_guard.domain.enums import SUPPORTED_SCHEMA_VERSION


class Sample(BaseModel):
    """A single timing observation (e.g. one produced block).

    Immutable after creation.
    """

    schema_version: int = Field(
        default=SUPPORTED_SCHEMA_VERSION,
        description="Payload schema version; only the supported version is classifiable",
    )
    timestamp: int = Field(..., ge=0, description="Observation time in seconds")
    sequence_number: int = Field(..., ge=0, description="Strictly increasing counter (e.g. block height)")
    source_label: str = Field(
        ...,
        max_length=256,
        description="Identifier of the reporting entity, carried through to alerts",
    )

    model_config = {"frozen": True}

    @property
    def is_supported_version(self) -> bool:
        return self.schema_version == SUPPORTED_SCHEMA_VERSION
