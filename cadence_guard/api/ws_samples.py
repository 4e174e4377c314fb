"""WebSocket endpoint for sample ingestion.

Path: /ws/samples

Accepts JSON matching the Sample schema, validates it at the boundary,
feeds it to the CadenceMonitor, and acknowledges with the classification
outcome.  Malformed samples get an error reply; the connection stays open.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from cadence_guard.domain.sample import Sample
from cadence_guard.services.monitor import CadenceMonitor, Observation

logger = logging.getLogger(__name__)


def create_sample_router(monitor: CadenceMonitor) -> APIRouter:
    """Factory that wires the sample endpoint to a concrete CadenceMonitor."""

    router = APIRouter()

    @router.websocket("/ws/samples")
    async def ingest_samples(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Sampler connected")

        try:
            while True:
                raw = await websocket.receive_json()

                # ── Validate at the boundary ─────────────────────────────
                try:
                    sample = Sample.model_validate(raw)
                except ValidationError as exc:
                    await websocket.send_json({
                        "status": "error",
                        "detail": f"Sample validation failed ({exc.error_count()} error(s))",
                    })
                    continue

                # ── Classify and submit ──────────────────────────────────
                observation = await monitor.observe(sample)

                # ── Acknowledge ──────────────────────────────────────────
                await websocket.send_json(_acknowledgement(observation))

        except WebSocketDisconnect:
            logger.info("Sampler disconnected")

    return router


def _acknowledgement(observation: Observation) -> dict:
    if observation.duplicate:
        return {"status": "duplicate", "sequence_number": observation.sequence_number}

    classification = observation.classification
    ack = {
        "status": "accepted",
        "sequence_number": observation.sequence_number,
        "accept": classification.accept,
        "rejection": classification.rejection.value if classification.rejection else None,
        "anomaly_type": classification.verdict.anomaly_type.value if classification.verdict else None,
        "record_id": None,
    }
    if observation.submission is not None:
        ack["record_id"] = observation.submission.record_id
        if not observation.submission.ok:
            ack["status"] = "refused"
    return ack
