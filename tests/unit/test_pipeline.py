"""Unit tests for the record-processing pipeline."""

import io
import json
from datetime import date
from pathlib import Path

import pytest

from location_history.exceptions import (
    ActivityTypeError,
    DataLoadError,
    DateRangeError,
    DecodeError,
    ValidationError,
)
from location_history.models import ActivityType
from location_history.pipeline import Pipeline, run_pipeline
from location_history.settings import Settings


class TestPipelineCounts:
    """Test the per-stage counts on the sample export."""

    def test_default_run(self, records_file: Path, settings: Settings):
        result = Pipeline(settings).run(records_file)
        summary = result.summary

        assert summary.parsed == 6
        assert summary.skipped == 2
        assert summary.loaded == 6
        assert summary.removed_outliers == 1
        assert summary.returned == 5
        assert len(result.records) == 5
        assert summary.track_length_m > 0

    def test_counts_are_ordered(self, records_file: Path, settings: Settings):
        summary = Pipeline(settings).run(records_file, activity="ON_*").summary

        assert summary.returned <= summary.loaded <= summary.parsed

    def test_output_is_chronological(self, records_file: Path, settings: Settings):
        records = Pipeline(settings).run(records_file).records
        timestamps = [r.timestamp for r in records]

        assert timestamps == sorted(timestamps)

    def test_empty_export(self, empty_records_file: Path, settings: Settings):
        result = Pipeline(settings).run(empty_records_file)

        assert result.records == []
        assert result.summary.returned == 0
        assert result.summary.track_length_m == 0.0

    def test_run_pipeline_helper(self, records_file: Path, sample_config_file: Path):
        result = run_pipeline(str(records_file), str(sample_config_file))

        assert result.summary.returned == 5


class TestPipelineWindow:
    """Test date range and record limit."""

    def test_start_date(self, records_file: Path, settings: Settings):
        result = Pipeline(settings).run(records_file, start_date=date(2016, 8, 8))

        assert result.summary.out_of_range == 5
        assert result.summary.loaded == 1
        assert [r.altitude for r in result.records] == [120]

    def test_end_date(self, records_file: Path, settings: Settings):
        result = Pipeline(settings).run(records_file, end_date=date(2016, 8, 8))

        assert result.summary.loaded == 5
        assert result.summary.returned == 4

    def test_record_limit_stops_reading(self, records_file: Path, settings: Settings):
        result = Pipeline(settings).run(records_file, record_limit=2)

        assert result.summary.loaded == 2
        assert result.summary.parsed == 2
        assert result.summary.skipped == 0

    def test_invalid_range_fails_before_reading(self, tmp_path: Path, settings: Settings):
        with pytest.raises(DateRangeError):
            Pipeline(settings).run(
                tmp_path / "missing.json",
                start_date=date(2020, 1, 2),
                end_date=date(2020, 1, 1),
            )


class TestPipelineFilters:
    """Test the optional distance and activity stages."""

    @pytest.mark.parametrize(
        "pattern, expected",
        [
            ("WALKING", [1]),
            ("ON_*", [1, 4]),
            ("{IN_VEHICLE,STILL}", [0, 3]),
            ("STILL", [0]),
        ],
    )
    def test_activity_pattern(
        self, records_file: Path, settings: Settings, pattern: str, expected: list
    ):
        result = Pipeline(settings).run(records_file, activity=pattern)

        assert [self._index(r) for r in result.records] == expected
        assert result.summary.removed_by_activity == 5 - len(expected)

    def test_activity_min_confidence(self, records_file: Path, settings: Settings):
        result = Pipeline(settings).run(records_file, activity="STILL", min_confidence=19)

        assert [self._index(r) for r in result.records] == [0, 3]

    def test_center(self, records_file: Path, settings: Settings):
        result = Pipeline(settings).run(
            records_file, center=(50.0373489, 8.3320934, 150.0)
        )

        assert result.summary.removed_by_distance == 2
        assert [self._index(r) for r in result.records] == [0, 1, 7]

    def test_unknown_activity_fails_before_reading(
        self, tmp_path: Path, settings: Settings
    ):
        with pytest.raises(ActivityTypeError):
            Pipeline(settings).run(tmp_path / "missing.json", activity="FLYING")

    def test_invalid_center(self, records_file: Path, settings: Settings):
        with pytest.raises(ValidationError):
            Pipeline(settings).run(records_file, center=(50.0, 8.0, -1.0))

    @staticmethod
    def _index(record) -> int:
        """Map a record of the sample export back to its position in the file."""
        stamps = {
            "04:54": 0,
            "04:56": 1,
            "04:57": 2,
            "04:58": 3,
            "05:00": 4,
            "10:00": 7,
        }
        return stamps[record.timestamp.strftime("%H:%M")]


class TestPipelineOrdering:
    """Test handling of unsorted input."""

    @pytest.fixture
    def reversed_handle(self, records_payload: dict):
        return io.StringIO(json.dumps(list(reversed(records_payload["locations"]))))

    def test_unsorted_input_is_sorted(self, reversed_handle, settings: Settings):
        result = Pipeline(settings).run(reversed_handle)
        timestamps = [r.timestamp for r in result.records]

        assert timestamps == sorted(timestamps)
        assert result.summary.removed_outliers == 1

    def test_without_sorting(self, reversed_handle, settings: Settings):
        """Test that out-of-order records are never judged as outliers."""
        settings.sort_records = False

        result = Pipeline(settings).run(reversed_handle)

        assert result.summary.removed_outliers == 0
        assert result.records[0].timestamp.day == 9


class TestPipelineErrors:
    """Test fatal input errors."""

    def test_missing_file(self, tmp_path: Path, settings: Settings):
        with pytest.raises(DataLoadError):
            Pipeline(settings).run(tmp_path / "missing.json")

    def test_bad_top_level(self, tmp_path: Path, settings: Settings):
        path = tmp_path / "Records.json"
        path.write_text('"not an array"', encoding="utf-8")

        with pytest.raises(DecodeError):
            Pipeline(settings).run(path)

    def test_truncated_file(self, tmp_path: Path, settings: Settings):
        path = tmp_path / "Records.json"
        path.write_text(
            '{"locations": [{"timestamp": "2020-01-01T00:00:00Z", "latitudeE7": 1',
            encoding="utf-8",
        )

        with pytest.raises(DecodeError):
            Pipeline(settings).run(path)

    def test_invalid_utf8(self, tmp_path: Path, settings: Settings):
        path = tmp_path / "Records.json"
        path.write_bytes(b'{"locations": [\xff\xfe]}')

        with pytest.raises(DecodeError):
            Pipeline(settings).run(path)

    def test_binary_handle(self, records_payload: dict, settings: Settings):
        handle = io.BytesIO(json.dumps(records_payload).encode("utf-8"))

        assert Pipeline(settings).run(handle).summary.returned == 5

    def test_activity_types_of_sample(self, records_file: Path, settings: Settings):
        records = Pipeline(settings).run(records_file).records

        assert records[3].latest_activity().top_activity_type() is ActivityType.ON_BICYCLE
