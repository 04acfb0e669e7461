"""
Shared pytest fixtures for location-history tests.

This module provides reusable fixtures for:
- Settings configurations
- Raw Records.json payloads and files
- LocationRecord factories
"""

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

from location_history.models import LocationRecord
from location_history.settings import Settings

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Provide default settings."""
    return Settings()


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary YAML config file path for testing."""
    return tmp_path / "config.yaml"


@pytest.fixture
def sample_config_dict() -> dict:
    """Provide a sample configuration dictionary."""
    return {
        "max_speed_kmh": 250.0,
        "max_gap_seconds": 300,
        "min_confidence": 40,
        "table_rows": 10,
        "timeline_hidden_activities": ["unknown", "still"],
    }


@pytest.fixture
def sample_config_file(temp_config_file: Path, sample_config_dict: dict) -> Path:
    """Create a temporary config file with sample data."""
    with open(temp_config_file, "w") as f:
        yaml.dump(sample_config_dict, f)
    return temp_config_file


# ============================================================================
# Data Fixtures - Raw Takeout payloads
# ============================================================================


@pytest.fixture
def records_payload() -> dict:
    """
    Provide a small Records.json payload.

    Layout (all on 2016-08-07 UTC unless noted):
    0. 04:54 STILL 100, accuracy 19
    1. 04:56 ~111 m north, WALKING 80 / ON_FOOT 80 (tied top rank)
    2. 04:57 ~107 km north: implausible speed, an outlier
    3. 04:58 ~111 m north of #1, two estimates, latest is IN_VEHICLE 70 / STILL 20
    4. 05:00 legacy layout (timestampMs, activitys), ON_BICYCLE 90
    5. malformed timestamp
    6. missing latitudeE7
    7. 2016-08-09 10:00, no activity, altitude 120
    """
    return {
        "locations": [
            {
                "timestamp": "2016-08-07T04:54:00.678Z",
                "latitudeE7": 500373489,
                "longitudeE7": 83320934,
                "accuracy": 19,
                "activity": [
                    {
                        "timestamp": "2016-08-07T04:54:00.678Z",
                        "activity": [{"type": "STILL", "confidence": 100}],
                    }
                ],
            },
            {
                "timestamp": "2016-08-07T04:56:00Z",
                "latitudeE7": 500383489,
                "longitudeE7": 83320934,
                "activity": [
                    {
                        "timestamp": "2016-08-07T04:56:00Z",
                        "activity": [
                            {"type": "WALKING", "confidence": 80},
                            {"type": "ON_FOOT", "confidence": 80},
                            {"type": "STILL", "confidence": 10},
                        ],
                    }
                ],
            },
            {
                "timestamp": "2016-08-07T04:57:00Z",
                "latitudeE7": 510000000,
                "longitudeE7": 83320934,
            },
            {
                "timestamp": "2016-08-07T04:58:00Z",
                "latitudeE7": 500393489,
                "longitudeE7": 83320934,
                "activity": [
                    {
                        "timestamp": "2016-08-07T04:57:30Z",
                        "activity": [{"type": "STILL", "confidence": 100}],
                    },
                    {
                        "timestamp": "2016-08-07T04:58:00Z",
                        "activity": [
                            {"type": "IN_VEHICLE", "confidence": 70},
                            {"type": "STILL", "confidence": 20},
                        ],
                    },
                ],
            },
            {
                "timestampMs": "1470546000000",
                "latitudeE7": 500403489,
                "longitudeE7": 83320934,
                "activitys": [
                    {
                        "timestampMs": "1470546000000",
                        "activities": [{"type": "onBicycle", "confidence": 5},
                                       {"type": "ON_BICYCLE", "confidence": 90}],
                    }
                ],
            },
            {
                "timestamp": "not a date",
                "latitudeE7": 500373489,
                "longitudeE7": 83320934,
            },
            {
                "timestamp": "2016-08-07T05:10:00Z",
                "longitudeE7": 83320934,
            },
            {
                "timestamp": "2016-08-09T10:00:00Z",
                "latitudeE7": 500373489,
                "longitudeE7": 83320934,
                "altitude": 120,
            },
        ]
    }


@pytest.fixture
def records_file(tmp_path: Path, records_payload: dict) -> Path:
    """Write the sample payload to a Records.json file."""
    path = tmp_path / "Records.json"
    path.write_text(json.dumps(records_payload, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def empty_records_file(tmp_path: Path) -> Path:
    """A Records.json file with an empty locations array."""
    path = tmp_path / "Empty.json"
    path.write_text('{"locations": []}', encoding="utf-8")
    return path


# ============================================================================
# Data Fixtures - Records
# ============================================================================


@pytest.fixture
def make_record() -> Callable[..., LocationRecord]:
    """
    Provide a factory for LocationRecord objects.

    ``activities`` is a list of estimates, each a list of (type, confidence)
    pairs; every estimate is stamped with the record's own timestamp.
    """

    def factory(
        timestamp: str,
        latitude: float = 50.0,
        longitude: float = 8.0,
        activities: list[list[tuple[str, int]]] | None = None,
        **extra,
    ) -> LocationRecord:
        estimates = [
            {
                "timestamp": timestamp,
                "activities": [
                    {"type": name, "confidence": confidence}
                    for name, confidence in estimate
                ],
            }
            for estimate in activities or []
        ]
        return LocationRecord.model_validate(
            {
                "timestamp": timestamp,
                "latitude": latitude,
                "longitude": longitude,
                "activities": estimates,
                **extra,
            }
        )

    return factory
