"""Append-only, index-addressable anomaly ledger.

The log itself is unbounded; any cap is applied by readers.
"""

from __future__ import annotations

from cadence_guard.domain.record import AnomalyRecord
from cadence_guard.domain.verdict import AnomalyVerdict


class AnomalyLedger:
    """List-backed log keyed by a 1-based, monotonically increasing record id.

    Not locked: the owning aggregator serialises access.
    """

    __slots__ = ("_records",)

    def __init__(self) -> None:
        self._records: list[AnomalyRecord] = []

    def append(self, verdict: AnomalyVerdict) -> AnomalyRecord:
        record = AnomalyRecord.from_verdict(self.next_id, verdict)
        self._records.append(record)
        return record

    @property
    def next_id(self) -> int:
        return len(self._records) + 1

    def get(self, record_id: int) -> AnomalyRecord | None:
        if 1 <= record_id <= len(self._records):
            return self._records[record_id - 1]
        return None

    def recent(self, count: int) -> list[AnomalyRecord]:
        """Up to *count* most recent records, newest first."""
        if count <= 0:
            return []
        return list(reversed(self._records[-count:]))

    def __len__(self) -> int:
        return len(self._records)
