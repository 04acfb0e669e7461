"""
Constants used throughout the location-history package.

Thresholds, Takeout field names and report defaults live here so that
settings, filters and the reporter agree on them.
"""

from typing import Final


# === Time Constants ===
class TimeConstants:
    """Time-related constants in seconds."""

    # Speed is only meaningful between samples closer than this
    MAX_SPEED_GAP: Final[int] = 600  # 10 minutes


# === Geodesy ===
class GeoConstants:
    """Earth model and coordinate encoding constants."""

    MEAN_EARTH_RADIUS_M: Final[float] = 6_371_008.8
    E7_SCALE: Final[float] = 10_000_000.0  # latitudeE7 / longitudeE7 divisor
    MS_TO_KMH: Final[float] = 3.6


# === Outlier Detection ===
class OutlierThresholds:
    """Velocity thresholds used to reject implausible samples."""

    MAX_SPEED_KMH: Final[float] = 300.0


# === Activity Confidence ===
class ConfidenceBounds:
    """Bounds for activity confidence percentages."""

    MIN: Final[int] = 0
    MAX: Final[int] = 100


# === Takeout File Layout ===
class TakeoutConstants:
    """Field names and defaults of the Records.json export."""

    RECORDS_KEY: Final[str] = "locations"
    READ_CHUNK_SIZE: Final[int] = 65536


# === Date Argument Formats ===
class DateFormats:
    """Accepted formats for start/end date arguments."""

    ACCEPTED: Final[tuple[str, ...]] = ("%y_%m_%d", "%Y-%m-%d", "%Y%m%d")


# === CSV Export ===
class CSVConstants:
    """Constants for CSV file export."""

    DEFAULT_SEPARATOR: Final[str] = ";"  # Semicolon-separated format
    DEFAULT_ENCODING: Final[str] = "utf-8"


# === Reporting ===
class ReportConstants:
    """Defaults for the text report."""

    MISSING_VALUE: Final[str] = "???"
    TABLE_ROWS: Final[int] = 50
    LEGEND_COLUMNS: Final[int] = 2
