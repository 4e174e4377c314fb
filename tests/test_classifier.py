"""Tests for the stateless CadenceClassifier."""

import pytest

from cadence_guard.core.classifier import CadenceClassifier, Thresholds, classify
from cadence_guard.domain.enums import AnomalyType, ClassificationRejection
from cadence_guard.domain.sample import Sample

from tests.test_sample import _BASE_SEQ, _BASE_TS, _valid_sample, _window


@pytest.fixture
def classifier() -> CadenceClassifier:
    return CadenceClassifier()


# ── Anomaly Labels ───────────────────────────────────────────────────────────


class TestAnomalyLabels:
    def test_too_slow(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(70, 15))
        assert result.accept is True
        assert result.verdict is not None
        assert result.verdict.anomaly_type == AnomalyType.TOO_SLOW
        assert result.verdict.interval1 == 70
        assert result.verdict.interval2 == 15

    def test_too_fast(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(1, 12))
        assert result.verdict.anomaly_type == AnomalyType.TOO_FAST

    def test_high_variance(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(45, 5))
        assert result.verdict.anomaly_type == AnomalyType.HIGH_VARIANCE
        assert (result.verdict.interval1, result.verdict.interval2) == (45, 5)

    def test_stalled_wins_over_too_slow(self, classifier: CadenceClassifier) -> None:
        """40 ≥ 36 on both sides → STALLED even though TOO_SLOW-style gaps exist."""
        result = classifier.classify(_window(40, 38))
        assert result.verdict.anomaly_type == AnomalyType.STALLED

    def test_stalled_wins_when_both_exceed_max(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(90, 75))
        assert result.verdict.anomaly_type == AnomalyType.STALLED

    def test_too_slow_wins_over_too_fast(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(70, 1))
        assert result.verdict.anomaly_type == AnomalyType.TOO_SLOW

    def test_too_fast_wins_over_high_variance(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(2, 40))
        assert result.verdict.anomaly_type == AnomalyType.TOO_FAST

    def test_normal_cadence_has_no_verdict(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(12, 13))
        assert result.accept is True
        assert result.verdict is None
        assert result.rejection is None
        assert not result.is_alert

    def test_verdict_carries_newest_sample_attribution(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(70, 15, label="builder-3"))
        assert result.verdict.source_label == "builder-3"
        assert result.verdict.sequence_number == _BASE_SEQ
        assert result.verdict.observed_at == _BASE_TS


# ── Boundaries ───────────────────────────────────────────────────────────────


class TestBoundaries:
    def test_stall_threshold_is_inclusive(self, classifier: CadenceClassifier) -> None:
        assert classifier.classify(_window(36, 36)).verdict.anomaly_type == AnomalyType.STALLED

    def test_just_below_stall_threshold_is_normal(self, classifier: CadenceClassifier) -> None:
        assert classifier.classify(_window(35, 36)).verdict is None

    def test_max_interval_is_inclusive(self, classifier: CadenceClassifier) -> None:
        assert classifier.classify(_window(60, 12)).verdict.anomaly_type == AnomalyType.TOO_SLOW

    def test_min_interval_is_inclusive(self, classifier: CadenceClassifier) -> None:
        assert classifier.classify(_window(12, 2)).verdict.anomaly_type == AnomalyType.TOO_FAST

    def test_just_above_min_interval_is_normal(self, classifier: CadenceClassifier) -> None:
        assert classifier.classify(_window(3, 12)).verdict is None

    def test_variance_threshold_is_inclusive(self, classifier: CadenceClassifier) -> None:
        assert classifier.classify(_window(30, 5)).verdict.anomaly_type == AnomalyType.HIGH_VARIANCE

    def test_just_below_variance_threshold_is_normal(self, classifier: CadenceClassifier) -> None:
        assert classifier.classify(_window(29, 5)).verdict is None


# ── Rejections ───────────────────────────────────────────────────────────────


class TestRejections:
    def test_empty_window(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify([])
        assert result.accept is False
        assert result.verdict is None
        assert result.rejection == ClassificationRejection.INSUFFICIENT_DATA

    def test_two_samples_even_if_anomalous(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(90, 90)[:2])
        assert result.accept is False
        assert result.verdict is None

    def test_bad_version_on_any_sample(self, classifier: CadenceClassifier) -> None:
        for index in range(3):
            window = _window(70, 15)
            window[index] = window[index].model_copy(update={"schema_version": 2})
            result = classifier.classify(window)
            assert result.accept is False
            assert result.rejection == ClassificationRejection.INVALID_SCHEMA

    def test_empty_label_on_newest(self, classifier: CadenceClassifier) -> None:
        window = _window(70, 15)
        window[0] = window[0].model_copy(update={"source_label": ""})
        result = classifier.classify(window)
        assert result.accept is False
        assert result.rejection == ClassificationRejection.INVALID_PAYLOAD

    def test_empty_label_on_older_sample_is_fine(self, classifier: CadenceClassifier) -> None:
        window = _window(70, 15)
        window[2] = window[2].model_copy(update={"source_label": ""})
        assert classifier.classify(window).accept is True

    def test_sequence_not_strictly_decreasing(self, classifier: CadenceClassifier) -> None:
        window = _window(12, 13)
        window[1] = window[1].model_copy(update={"sequence_number": window[0].sequence_number})
        result = classifier.classify(window)
        assert result.accept is False
        assert result.rejection == ClassificationRejection.ORDERING_VIOLATION

    def test_oldest_first_order_rejected(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(list(reversed(_window(12, 13))))
        assert result.accept is False
        assert result.rejection == ClassificationRejection.ORDERING_VIOLATION

    def test_equal_timestamps_rejected(self, classifier: CadenceClassifier) -> None:
        result = classifier.classify(_window(0, 12))
        assert result.accept is False
        assert result.rejection == ClassificationRejection.ORDERING_VIOLATION

    def test_gap_within_bound_accepted(self, classifier: CadenceClassifier) -> None:
        window = [
            Sample.model_validate(_valid_sample(timestamp=1000, sequence_number=110)),
            Sample.model_validate(_valid_sample(timestamp=988, sequence_number=105)),
            Sample.model_validate(_valid_sample(timestamp=975, sequence_number=100)),
        ]
        assert classifier.classify(window).accept is True

    def test_gap_beyond_bound_rejected(self, classifier: CadenceClassifier) -> None:
        window = [
            Sample.model_validate(_valid_sample(timestamp=1000, sequence_number=111)),
            Sample.model_validate(_valid_sample(timestamp=988, sequence_number=105)),
            Sample.model_validate(_valid_sample(timestamp=975, sequence_number=100)),
        ]
        result = classifier.classify(window)
        assert result.accept is False
        assert result.rejection == ClassificationRejection.ORDERING_VIOLATION

    def test_only_three_newest_samples_are_inspected(self, classifier: CadenceClassifier) -> None:
        window = _window(70, 15)
        window.append(window[0])  # out-of-order trailing sample is ignored
        assert classifier.classify(window).verdict.anomaly_type == AnomalyType.TOO_SLOW


# ── Thresholds ───────────────────────────────────────────────────────────────


class TestThresholds:
    def test_defaults(self) -> None:
        t = Thresholds()
        assert t.as_tuple() == (12, 60, 2, 25, 3)
        assert t.max_gap == 10
        assert t.stall_threshold == 36

    def test_thresholds_are_read_only(self) -> None:
        with pytest.raises(Exception):
            Thresholds().max_interval = 1

    def test_non_positive_rejected(self) -> None:
        with pytest.raises(ValueError):
            Thresholds(normal_interval=0)

    def test_min_must_be_below_max(self) -> None:
        with pytest.raises(ValueError):
            Thresholds(min_interval=60, max_interval=60)

    def test_stall_threshold_follows_cadence(self) -> None:
        """A 2 s chain stalls at 6 s with the same multiplier."""
        c = CadenceClassifier(Thresholds(normal_interval=2, max_interval=10, min_interval=1))
        assert c.classify(_window(6, 7)).verdict.anomaly_type == AnomalyType.STALLED

    def test_module_level_classify_uses_defaults(self) -> None:
        assert classify(_window(70, 15)).verdict.anomaly_type == AnomalyType.TOO_SLOW

    def test_classification_is_deterministic(self, classifier: CadenceClassifier) -> None:
        window = _window(45, 5)
        assert classifier.classify(window) == classifier.classify(window)
