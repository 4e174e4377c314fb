"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "cadence-guard"
    debug: bool = False
    log_level: str = "INFO"

    # Classifier thresholds (seconds unless noted)
    normal_interval: int = 12
    max_interval: int = 60
    min_interval: int = 2
    variance_threshold: int = 25
    stall_multiplier: int = 3
    max_gap: int = 10  # sequence units

    # Emergency entry rules
    emergency_slow_interval: int = 120
    emergency_fast_interval: int = 1

    # Health queries
    health_sequence_window: int = 50
    recent_anomalies_cap: int = 20

    # Authorization
    owner: str = "owner"
    monitor_identity: str = "cadence-monitor"
    authorized_sources: list[str] = []

    # Sampling
    source_label: str = "block-time-monitor"

    model_config = {"env_prefix": "CADENCE_"}


settings = Settings()
