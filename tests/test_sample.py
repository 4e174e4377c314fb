"""Tests for the Sample model and the shared sample/window helpers."""

import pytest

from cadence_guard.domain.sample import Sample

_BASE_TS = 1_700_000_000
_BASE_SEQ = 500


def _valid_sample(**overrides) -> dict:
    """Return a valid sample dict, with optional overrides."""
    base = {
        "schema_version": 1,
        "timestamp": _BASE_TS,
        "sequence_number": _BASE_SEQ,
        "source_label": "hoodi-validator-01",
    }
    base.update(overrides)
    return base


def _window(
    interval1: int,
    interval2: int,
    newest_ts: int = _BASE_TS,
    newest_seq: int = _BASE_SEQ,
    label: str = "hoodi-validator-01",
) -> list[Sample]:
    """Three consecutive samples, newest first, separated by the given intervals."""
    return [
        Sample.model_validate(_valid_sample(
            timestamp=newest_ts, sequence_number=newest_seq, source_label=label,
        )),
        Sample.model_validate(_valid_sample(
            timestamp=newest_ts - interval1, sequence_number=newest_seq - 1, source_label=label,
        )),
        Sample.model_validate(_valid_sample(
            timestamp=newest_ts - interval1 - interval2, sequence_number=newest_seq - 2, source_label=label,
        )),
    ]


class TestSampleValidation:
    def test_valid_sample_parses(self) -> None:
        sample = Sample.model_validate(_valid_sample())
        assert sample.sequence_number == _BASE_SEQ
        assert sample.is_supported_version

    def test_schema_version_defaults_to_supported(self) -> None:
        sample = Sample(timestamp=10, sequence_number=1, source_label="x")
        assert sample.schema_version == 1

    def test_unsupported_version_is_constructible(self) -> None:
        """Version checks belong to the classifier, not the model."""
        sample = Sample.model_validate(_valid_sample(schema_version=2))
        assert not sample.is_supported_version

    def test_empty_label_is_constructible(self) -> None:
        sample = Sample.model_validate(_valid_sample(source_label=""))
        assert sample.source_label == ""

    def test_negative_timestamp_rejected(self) -> None:
        with pytest.raises(Exception):
            Sample.model_validate(_valid_sample(timestamp=-1))

    def test_negative_sequence_rejected(self) -> None:
        with pytest.raises(Exception):
            Sample.model_validate(_valid_sample(sequence_number=-5))

    def test_sample_is_immutable(self) -> None:
        sample = Sample.model_validate(_valid_sample())
        with pytest.raises(Exception):
            sample.timestamp = 0

    def test_json_round_trip_keeps_every_field(self) -> None:
        sample = Sample.model_validate(_valid_sample(schema_version=3, source_label="node-7"))
        assert Sample.model_validate_json(sample.model_dump_json()) == sample


class TestWindowHelper:
    def test_window_is_newest_first(self) -> None:
        window = _window(12, 13)
        assert window[0].timestamp - window[1].timestamp == 12
        assert window[1].timestamp - window[2].timestamp == 13
        assert window[0].sequence_number > window[1].sequence_number > window[2].sequence_number
