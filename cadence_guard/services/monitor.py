"""CadenceMonitor — drives window → classifier → aggregator for each sample.

The monitor is the in-process stand-in for the external sampling loop: it
keeps the three most recent samples, classifies them after every new
observation, and submits anomalies to the aggregator under its own
identity.  It does not decide what an anomaly means; the aggregator does.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from cadence_guard.core.classifier import CadenceClassifier
from cadence_guard.core.window import SampleWindow
from cadence_guard.domain.enums import SUPPORTED_SCHEMA_VERSION
from cadence_guard.domain.record import SubmissionResult
from cadence_guard.domain.sample import Sample
from cadence_guard.domain.verdict import Classification
from cadence_guard.store.aggregator import AnomalyAggregator

logger = logging.getLogger(__name__)


class Observation(BaseModel):
    """What happened to one observed sample."""

    sequence_number: int
    duplicate: bool = False
    classification: Optional[Classification] = None
    submission: Optional[SubmissionResult] = None

    model_config = {"frozen": True}


class CadenceMonitor:
    """Feeds samples through the classifier and reports anomalies.

    Args:
        aggregator: Where confirmed anomalies are submitted.
        identity: Submitter identity; must be the owner or authorized.
        source_label: Label stamped on samples built by make_sample().
        classifier: Shared, stateless classifier.
    """

    def __init__(
        self,
        aggregator: AnomalyAggregator,
        identity: str,
        source_label: str,
        classifier: CadenceClassifier | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._identity = identity
        self._source_label = source_label
        self._classifier = classifier or CadenceClassifier()
        self._window = SampleWindow()
        self._latest_sequence = 0

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def classifier(self) -> CadenceClassifier:
        return self._classifier

    @property
    def latest_sequence(self) -> int:
        return self._latest_sequence

    @property
    def window(self) -> list[Sample]:
        return self._window.samples

    def make_sample(self, timestamp: int, sequence_number: int) -> Sample:
        """Build a sample stamped with this monitor's label and schema version."""
        return Sample(
            schema_version=SUPPORTED_SCHEMA_VERSION,
            timestamp=timestamp,
            sequence_number=sequence_number,
            source_label=self._source_label,
        )

    async def observe(self, sample: Sample) -> Observation:
        """Push *sample*, classify the window and submit any anomaly."""
        if not self._window.push(sample):
            return Observation(sequence_number=sample.sequence_number, duplicate=True)

        self._latest_sequence = max(self._latest_sequence, sample.sequence_number)
        classification = self._classifier.classify(self._window.samples)

        if not classification.is_alert:
            return Observation(sequence_number=sample.sequence_number, classification=classification)

        assert classification.verdict is not None
        submission = await self._aggregator.respond(self._identity, classification.verdict)
        if not submission.ok:
            logger.warning(
                "Aggregator refused anomaly at %d: %s",
                sample.sequence_number,
                submission.reason.value if submission.reason else "unknown",
            )
        return Observation(
            sequence_number=sample.sequence_number,
            classification=classification,
            submission=submission,
        )

    async def is_healthy(self) -> bool:
        """Health as seen from the newest observed sequence number."""
        return await self._aggregator.is_healthy(self._latest_sequence)
