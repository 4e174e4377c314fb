"""Tests for environment-driven settings."""

from cadence_guard.config import Settings


class TestSettings:
    def test_defaults_match_reference_cadence(self) -> None:
        cfg = Settings()
        assert (cfg.normal_interval, cfg.max_interval, cfg.min_interval) == (12, 60, 2)
        assert (cfg.variance_threshold, cfg.stall_multiplier, cfg.max_gap) == (25, 3, 10)
        assert cfg.health_sequence_window == 50
        assert cfg.recent_anomalies_cap == 20

    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("CADENCE_OWNER", "0xAdmin")
        monkeypatch.setenv("CADENCE_MAX_INTERVAL", "90")
        monkeypatch.setenv("CADENCE_AUTHORIZED_SOURCES", '["0xA", "0xB"]')
        cfg = Settings()
        assert cfg.owner == "0xAdmin"
        assert cfg.max_interval == 90
        assert cfg.authorized_sources == ["0xA", "0xB"]
