"""REST endpoints for the anomaly aggregator.

Queries are open.  Submissions require an authorized X-Caller-Id; source
management and the emergency override require the owner.  Typed
rejections map to 403 (unauthorized) and 422 (invalid payload).
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from cadence_guard.api.dependencies import caller_identity, raise_for_rejection
from cadence_guard.core.classifier import Thresholds
from cadence_guard.store.aggregator import AnomalyAggregator

logger = logging.getLogger(__name__)


class EmergencyOverride(BaseModel):
    """Body of POST /api/emergency."""

    value: bool
    reason: str = Field(default="", max_length=512)


def create_aggregator_router(aggregator: AnomalyAggregator, thresholds: Thresholds) -> APIRouter:
    """Factory that wires the aggregator endpoints to concrete instances."""

    router = APIRouter(prefix="/api", tags=["aggregator"])

    # ── Queries ──────────────────────────────────────────────────────────

    @router.get("/stats")
    async def get_stats() -> dict[str, Any]:
        stats = await aggregator.stats()
        return stats.model_dump()

    @router.get("/anomalies")
    async def list_anomalies(count: int = Query(default=20, ge=0)) -> dict[str, Any]:
        """Most recent anomalies, newest first (server-side cap applies)."""
        records = await aggregator.recent_anomalies(count)
        return {
            "anomalies": [r.model_dump(mode="json") for r in records],
            "count": len(records),
        }

    @router.get("/anomalies/{record_id}")
    async def get_anomaly(record_id: int) -> dict[str, Any]:
        record = await aggregator.get_record(record_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Anomaly {record_id} not found")
        return {
            **record.model_dump(mode="json"),
            "description": aggregator.describe(record.anomaly_type),
        }

    @router.get("/thresholds")
    async def get_thresholds() -> dict[str, Any]:
        return {
            "thresholds": list(thresholds.as_tuple()),
            **asdict(thresholds),
            "stall_threshold": thresholds.stall_threshold,
        }

    @router.get("/describe/{anomaly_type}")
    async def describe(anomaly_type: str) -> dict[str, str]:
        return {"anomaly_type": anomaly_type, "description": aggregator.describe(anomaly_type)}

    # ── Submission ───────────────────────────────────────────────────────

    @router.post("/respond")
    async def respond(
        payload: dict[str, Any] = Body(...),
        caller: str = Depends(caller_identity),
    ) -> dict[str, Any]:
        result = await aggregator.respond_payload(caller, payload)
        raise_for_rejection(result)
        return {"status": "accepted", "record_id": result.record_id}

    # ── Administration ───────────────────────────────────────────────────

    @router.get("/sources")
    async def list_sources() -> dict[str, Any]:
        return {"owner": aggregator.owner, "sources": await aggregator.authorized_sources()}

    @router.put("/sources/{source_id}")
    async def authorize_source(source_id: str, caller: str = Depends(caller_identity)) -> dict[str, Any]:
        result = await aggregator.authorize_source(caller, source_id)
        raise_for_rejection(result)
        return {"source": source_id, "authorized": True}

    @router.delete("/sources/{source_id}")
    async def revoke_source(source_id: str, caller: str = Depends(caller_identity)) -> dict[str, Any]:
        result = await aggregator.revoke_source(caller, source_id)
        raise_for_rejection(result)
        return {"source": source_id, "authorized": False}

    @router.post("/emergency")
    async def set_emergency(
        override: EmergencyOverride,
        caller: str = Depends(caller_identity),
    ) -> dict[str, Any]:
        result = await aggregator.set_emergency_mode(caller, override.value, override.reason)
        raise_for_rejection(result)
        stats = await aggregator.stats()
        return {"emergency_mode": stats.emergency_mode}

    return router
