"""cadence-guard — block-time anomaly classification and aggregation.

This is the application entry point.  It wires the CadenceClassifier,
AnomalyAggregator, CadenceMonitor, and HTTP/WebSocket endpoints together.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from cadence_guard.api.aggregator import create_aggregator_router
from cadence_guard.api.ws_samples import create_sample_router
from cadence_guard.config import Settings, settings
from cadence_guard.core.classifier import CadenceClassifier, Thresholds
from cadence_guard.core.emergency import EmergencyRules
from cadence_guard.services.monitor import CadenceMonitor
from cadence_guard.services.notifier import LoggingSink, SubscriberHub
from cadence_guard.store.aggregator import AnomalyAggregator

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)


def create_app(cfg: Settings) -> FastAPI:
    """Build a fully wired application from *cfg*."""

    # ── Classifier ───────────────────────────────────────────────────────────

    thresholds = Thresholds(
        normal_interval=cfg.normal_interval,
        max_interval=cfg.max_interval,
        min_interval=cfg.min_interval,
        variance_threshold=cfg.variance_threshold,
        stall_multiplier=cfg.stall_multiplier,
        max_gap=cfg.max_gap,
    )
    classifier = CadenceClassifier(thresholds)

    # ── State ────────────────────────────────────────────────────────────────

    hub = SubscriberHub()
    aggregator = AnomalyAggregator(
        owner=cfg.owner,
        rules=EmergencyRules(
            slow_interval=cfg.emergency_slow_interval,
            fast_interval=cfg.emergency_fast_interval,
        ),
        sinks=[LoggingSink(), hub],
        authorized_sources=[*cfg.authorized_sources, cfg.monitor_identity],
        health_window=cfg.health_sequence_window,
        recent_cap=cfg.recent_anomalies_cap,
    )
    monitor = CadenceMonitor(
        aggregator,
        identity=cfg.monitor_identity,
        source_label=cfg.source_label,
        classifier=classifier,
    )

    # ── App ──────────────────────────────────────────────────────────────────

    app = FastAPI(
        title=cfg.app_name,
        description="Block-time anomaly classification and aggregation",
        version="0.1.0",
        debug=cfg.debug,
    )
    app.state.aggregator = aggregator
    app.state.monitor = monitor
    app.state.notifications = hub

    # ── Routes ───────────────────────────────────────────────────────────────

    app.include_router(create_sample_router(monitor))
    app.include_router(create_aggregator_router(aggregator, thresholds))

    # ── Health ───────────────────────────────────────────────────────────────

    @app.get("/health")
    async def health() -> dict:
        stats = await aggregator.stats()
        healthy = await monitor.is_healthy()
        state = await aggregator.health_state()
        return {
            "status": "ok" if healthy else "degraded",
            "healthy": healthy,
            "health_state": state.value,
            "emergency_mode": stats.emergency_mode,
            "total_anomalies": stats.total_anomalies,
            "last_anomaly_sequence": stats.last_anomaly_sequence,
            "latest_sequence": monitor.latest_sequence,
        }

    return app


app = create_app(settings)
