"""In-memory anomaly aggregator with async-safe access and owner-gated admin.

Design notes:
    - An asyncio.Lock guards every mutation *and* every read, so queries
      always observe a consistent snapshot of counters and history.
    - Capability checks sit at the top of each mutating method and return a
      typed SubmissionResult instead of raising.  A rejected call never
      mutates state and never emits a notification.
    - Emergency mode is sticky: it is entered by the escalation rule or a
      manual override, and only a manual override clears it.
    - Notifications are published while the lock is held so their order
      matches the order of state changes.  A failing sink is logged and
      does not undo the change.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Union

from pydantic import ValidationError

from cadence_guard.core.emergency import EmergencyRules
from cadence_guard.domain.enums import (
    ANOMALY_DESCRIPTIONS,
    NO_ANOMALY_DESCRIPTION,
    AnomalyType,
    HealthState,
    RejectReason,
)
from cadence_guard.domain.events import (
    AnomalyRecorded,
    EmergencyModeChanged,
    Notification,
    SourceAuthorizationChanged,
)
from cadence_guard.domain.record import AggregatorStats, AnomalyRecord, SubmissionResult
from cadence_guard.domain.verdict import AnomalyVerdict
from cadence_guard.services.notifier import NotificationSink
from cadence_guard.store.ledger import AnomalyLedger

logger = logging.getLogger(__name__)

RawPayload = Union[str, bytes, Mapping[str, Any]]


class AnomalyAggregator:
    """Async-safe owner of all aggregator state.

    Args:
        owner: Identity allowed to administer the aggregator.  Fixed for
            the lifetime of the instance and always permitted to submit.
        rules: Emergency escalation limits.
        sinks: Notification sinks, called in order for every event.
        authorized_sources: Identities permitted to submit from the start.
        health_window: Sequence units that must pass after the last anomaly
            before the monitored source counts as healthy again.
        recent_cap: Upper bound on records returned by recent_anomalies().
    """

    def __init__(
        self,
        owner: str,
        rules: EmergencyRules | None = None,
        sinks: Iterable[NotificationSink] = (),
        authorized_sources: Iterable[str] = (),
        health_window: int = 50,
        recent_cap: int = 20,
    ) -> None:
        if not owner:
            raise ValueError("owner identity must be non-empty")
        if health_window <= 0 or recent_cap <= 0:
            raise ValueError("health_window and recent_cap must be positive")

        self._owner = owner
        self._rules = rules or EmergencyRules()
        self._sinks: list[NotificationSink] = list(sinks)
        self._health_window = health_window
        self._recent_cap = recent_cap
        self._lock = asyncio.Lock()

        self._authorized: set[str] = {s for s in authorized_sources if s}
        self._ledger = AnomalyLedger()
        self._emergency_mode = False
        self._last_anomaly_sequence = 0
        self._last_anomaly_time = 0

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def recent_cap(self) -> int:
        return self._recent_cap

    def add_sink(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    # ── Submission ───────────────────────────────────────────────────────

    async def respond(self, submitter: str, verdict: AnomalyVerdict) -> SubmissionResult:
        """Record *verdict* on behalf of *submitter*.

        Returns the new record id on success, or a rejection reason.
        """
        async with self._lock:
            if not self._may_submit(submitter):
                logger.warning("Rejected submission from unauthorized source %r", submitter)
                return SubmissionResult.rejected(RejectReason.UNAUTHORIZED, "submitter not authorized")

            problem = self._payload_problem(verdict)
            if problem:
                logger.warning("Rejected submission from %r: %s", submitter, problem)
                return SubmissionResult.rejected(RejectReason.INVALID_PAYLOAD, problem)

            record = self._ledger.append(verdict)
            self._last_anomaly_sequence = verdict.sequence_number
            self._last_anomaly_time = verdict.observed_at
            logger.info(
                "Recorded anomaly #%d %s at %d from %s (intervals %d/%d)",
                record.record_id,
                record.anomaly_type.value,
                record.sequence_number,
                record.source_label,
                record.interval1,
                record.interval2,
            )

            if self._rules.requires_emergency(verdict) and not self._emergency_mode:
                self._set_emergency(True, f"automatic: {verdict.anomaly_type.value} anomaly #{record.record_id}")

            self._notify(AnomalyRecorded(record=record, description=self.describe(record.anomaly_type)))
            return SubmissionResult.accepted(record.record_id)

    async def respond_payload(self, submitter: str, raw: RawPayload) -> SubmissionResult:
        """Decode an encoded verdict and submit it.

        A payload that does not decode into a verdict is rejected with
        INVALID_PAYLOAD.  Authorization is still checked first so that an
        unauthorized caller learns nothing about payload validity.
        """
        if not await self.is_authorized(submitter):
            logger.warning("Rejected payload from unauthorized source %r", submitter)
            return SubmissionResult.rejected(RejectReason.UNAUTHORIZED, "submitter not authorized")
        try:
            if isinstance(raw, (str, bytes)):
                verdict = AnomalyVerdict.model_validate_json(raw)
            else:
                verdict = AnomalyVerdict.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Undecodable payload from %r: %d error(s)", submitter, exc.error_count())
            return SubmissionResult.rejected(RejectReason.INVALID_PAYLOAD, "payload does not decode to a verdict")
        return await self.respond(submitter, verdict)

    # ── Administration ───────────────────────────────────────────────────

    async def authorize_source(self, caller: str, source_id: str) -> SubmissionResult:
        """Allow *source_id* to submit.  Owner only; idempotent."""
        return await self._set_authorization(caller, source_id, True)

    async def revoke_source(self, caller: str, source_id: str) -> SubmissionResult:
        """Withdraw *source_id*'s permission to submit.  Owner only; idempotent."""
        return await self._set_authorization(caller, source_id, False)

    async def set_emergency_mode(self, caller: str, value: bool, reason: str) -> SubmissionResult:
        """Manually enter or clear emergency mode.  Owner only.

        Changes state (and notifies) only when *value* differs from the
        current flag.
        """
        async with self._lock:
            if caller != self._owner:
                logger.warning("Rejected emergency override from %r", caller)
                return SubmissionResult.rejected(RejectReason.UNAUTHORIZED, "owner only")
            if value != self._emergency_mode:
                self._set_emergency(value, reason)
            return SubmissionResult.accepted()

    # ── Queries ──────────────────────────────────────────────────────────

    async def is_healthy(self, current_sequence: int) -> bool:
        """False in emergency, or within health_window units of the last anomaly."""
        async with self._lock:
            if self._emergency_mode:
                return False
            if len(self._ledger) > 0:
                return current_sequence - self._last_anomaly_sequence >= self._health_window
            return True

    async def health_state(self) -> HealthState:
        async with self._lock:
            return HealthState.EMERGENCY if self._emergency_mode else HealthState.HEALTHY

    async def recent_anomalies(self, count: int | None = None) -> list[AnomalyRecord]:
        """Most recent records, newest first, never more than recent_cap."""
        wanted = self._recent_cap if count is None else min(count, self._recent_cap)
        async with self._lock:
            return self._ledger.recent(wanted)

    async def get_record(self, record_id: int) -> AnomalyRecord | None:
        async with self._lock:
            return self._ledger.get(record_id)

    async def stats(self) -> AggregatorStats:
        async with self._lock:
            return AggregatorStats(
                total_anomalies=len(self._ledger),
                last_anomaly_sequence=self._last_anomaly_sequence,
                last_anomaly_time=self._last_anomaly_time,
                emergency_mode=self._emergency_mode,
            )

    async def is_authorized(self, identity: str) -> bool:
        async with self._lock:
            return self._may_submit(identity)

    async def authorized_sources(self) -> list[str]:
        async with self._lock:
            return sorted(self._authorized)

    @staticmethod
    def describe(anomaly_type: AnomalyType | str) -> str:
        """Human-readable text for *anomaly_type*; unknown labels read as none."""
        try:
            kind = AnomalyType(anomaly_type)
        except ValueError:
            return NO_ANOMALY_DESCRIPTION
        return ANOMALY_DESCRIPTIONS.get(kind, NO_ANOMALY_DESCRIPTION)

    # ── Internals ────────────────────────────────────────────────────────

    def _may_submit(self, identity: str) -> bool:
        """Must be called while holding self._lock."""
        return identity == self._owner or identity in self._authorized

    @staticmethod
    def _payload_problem(verdict: AnomalyVerdict) -> str:
        if not verdict.source_label:
            return "empty source label"
        if not verdict.anomaly_type.is_anomaly:
            return "verdict carries no anomaly"
        if verdict.sequence_number == 0:
            return "sequence number must be positive"
        return ""

    async def _set_authorization(self, caller: str, source_id: str, authorized: bool) -> SubmissionResult:
        async with self._lock:
            if caller != self._owner:
                logger.warning("Rejected authorization change for %r from %r", source_id, caller)
                return SubmissionResult.rejected(RejectReason.UNAUTHORIZED, "owner only")
            if not source_id:
                return SubmissionResult.rejected(RejectReason.INVALID_PAYLOAD, "empty source id")

            if authorized == (source_id in self._authorized):
                return SubmissionResult.accepted()

            if authorized:
                self._authorized.add(source_id)
            else:
                self._authorized.discard(source_id)
            logger.info("Source %r authorized=%s", source_id, authorized)
            self._notify(SourceAuthorizationChanged(source=source_id, authorized=authorized))
            return SubmissionResult.accepted()

    def _set_emergency(self, value: bool, reason: str) -> None:
        """Must be called while holding self._lock."""
        self._emergency_mode = value
        if value:
            logger.warning("Entering emergency mode: %s", reason)
        else:
            logger.info("Emergency mode cleared: %s", reason)
        self._notify(EmergencyModeChanged(emergency_mode=value, reason=reason))

    def _notify(self, event: Notification) -> None:
        """Must be called while holding self._lock."""
        for sink in self._sinks:
            try:
                sink.publish(event)
            except Exception:
                logger.exception("Notification sink %r failed on %s", sink, event.event)
