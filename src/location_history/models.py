"""
Data models for the location-history package.

This module defines all the core data structures used throughout the application,
ensuring type safety and data validation using Pydantic models. The models
accept the raw field layout of Google Takeout ``Records.json`` files
(``latitudeE7``, ``timestampMs``, ``activitys`` ...) as well as their own
field names.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import ConfidenceBounds, GeoConstants, TimeConstants
from .geo import haversine_m


def _from_epoch_ms(value: int | float) -> datetime:
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {value!r}") from e


def parse_timestamp(value: Any) -> datetime:
    """
    Convert a Takeout timestamp into an aware UTC datetime.

    Accepts RFC 3339 strings (``2016-08-07T04:54:00.678Z``), legacy epoch
    milliseconds (as a string or a number) and datetime objects. Naive values
    are taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    elif isinstance(value, int | float):
        parsed = _from_epoch_ms(value)
    elif isinstance(value, str):
        raw = value.strip()
        if raw.isdigit():
            parsed = _from_epoch_ms(int(raw))
        else:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ActivityType(str, Enum):
    """Activity types reported by Google's activity recognition."""

    IN_VEHICLE = "IN_VEHICLE"
    EXITING_VEHICLE = "EXITING_VEHICLE"
    ON_BICYCLE = "ON_BICYCLE"
    ON_FOOT = "ON_FOOT"
    RUNNING = "RUNNING"
    STILL = "STILL"
    TILTING = "TILTING"
    UNKNOWN = "UNKNOWN"
    WALKING = "WALKING"

    @classmethod
    def parse(cls, value: Any) -> "ActivityType":
        """Map a raw type name onto a member; unrecognised names become UNKNOWN."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Activity type must be a string, got {value!r}")
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN


class Activity(BaseModel):
    """A single activity type with its confidence percentage."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    activity_type: ActivityType = Field(
        ..., alias="type", description="Recognised activity type"
    )
    confidence: int = Field(
        ...,
        ge=ConfidenceBounds.MIN,
        le=ConfidenceBounds.MAX,
        description="Confidence percentage (0-100)",
    )

    @field_validator("activity_type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> ActivityType:
        """Accept any casing and fall back to UNKNOWN."""
        return ActivityType.parse(v)

    def __str__(self) -> str:
        return f"{self.activity_type.value:<16}({self.confidence:>3}%)"


class ActivityEstimate(BaseModel):
    """A timestamped, ranked list of probable activities."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(..., description="When the estimate was made (UTC)")
    activities: tuple[Activity, ...] = Field(
        default=(), description="Activities in the order reported"
    )

    @model_validator(mode="before")
    @classmethod
    def from_takeout(cls, data: Any) -> Any:
        """Rename legacy Takeout keys (``timestampMs``, ``activity``)."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "timestamp" not in data and "timestampMs" in data:
            data["timestamp"] = data.pop("timestampMs")
        if "activities" not in data and "activity" in data:
            data["activities"] = data.pop("activity")
        return data

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> datetime:
        """Parse RFC 3339 or epoch-millisecond timestamps."""
        return parse_timestamp(v)

    @field_validator("activities", mode="after")
    @classmethod
    def unique_types(cls, v: tuple[Activity, ...]) -> tuple[Activity, ...]:
        """Collapse repeated activity types, keeping the highest confidence."""
        best: dict[ActivityType, Activity] = {}
        for activity in v:
            current = best.get(activity.activity_type)
            if current is None or activity.confidence > current.confidence:
                best[activity.activity_type] = activity
        return tuple(best.values())

    def top_activities(self) -> list[Activity]:
        """Activities sorted by descending confidence."""
        return sorted(self.activities, key=lambda a: a.confidence, reverse=True)

    def top_activity(self) -> Activity:
        """Highest-confidence activity, or UNKNOWN at 0% when empty."""
        ranked = self.top_activities()
        if ranked:
            return ranked[0]
        return Activity(activity_type=ActivityType.UNKNOWN, confidence=0)

    def top_activity_type(self) -> ActivityType:
        return self.top_activity().activity_type

    def top_ranked_types(self) -> set[ActivityType]:
        """
        All types sharing the highest confidence.

        Estimates frequently report several types at the same confidence, so
        the top rank is a set rather than a single type.
        """
        if not self.activities:
            return set()
        best = max(a.confidence for a in self.activities)
        return {a.activity_type for a in self.activities if a.confidence == best}

    def confidence_of(self, activity_type: ActivityType) -> int | None:
        for activity in self.activities:
            if activity.activity_type is activity_type:
                return activity.confidence
        return None

    def seconds_delta(self, other: "ActivityEstimate") -> float:
        return (self.timestamp - other.timestamp).total_seconds()

    def is_similar_type(self, other: "ActivityEstimate") -> bool:
        """True if our top activity is within the other's top three."""
        top_type = self.top_activity_type()
        return any(
            a.activity_type is top_type for a in other.top_activities()[:3]
        )

    def __str__(self) -> str:
        lines = [self.timestamp.isoformat()]
        lines.extend(str(a) for a in self.activities)
        return "\n".join(lines)


class LocationRecord(BaseModel):
    """Location sample decoded from a Takeout Records.json file."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(..., description="Sample time (UTC)")
    latitude: float = Field(..., ge=-90.0, le=90.0, description="Decimal degrees")
    longitude: float = Field(
        ..., ge=-180.0, le=180.0, description="Decimal degrees"
    )
    accuracy: int | None = Field(None, description="Accuracy radius in meters")
    altitude: int | None = Field(None, description="Altitude in meters")
    activities: tuple[ActivityEstimate, ...] = Field(
        default=(), description="Activity estimates attached to this sample"
    )

    @model_validator(mode="before")
    @classmethod
    def from_takeout(cls, data: Any) -> Any:
        """Convert E7 coordinates and rename legacy Takeout keys."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "timestamp" not in data and "timestampMs" in data:
            data["timestamp"] = data.pop("timestampMs")
        for axis in ("latitude", "longitude"):
            raw = data.pop(f"{axis}E7", None)
            if axis not in data and isinstance(raw, int | float):
                data[axis] = raw / GeoConstants.E7_SCALE
        if "activities" not in data:
            for legacy_key in ("activity", "activitys"):
                if legacy_key in data:
                    data["activities"] = data.pop(legacy_key)
                    break
        return data

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> datetime:
        """Parse RFC 3339 or epoch-millisecond timestamps."""
        return parse_timestamp(v)

    @field_validator("activities", mode="before")
    @classmethod
    def null_activities(cls, v: Any) -> Any:
        return () if v is None else v

    def latest_activity(self) -> ActivityEstimate | None:
        """The most recent activity estimate, if any."""
        if not self.activities:
            return None
        return max(self.activities, key=lambda estimate: estimate.timestamp)

    def distance_to(self, other: "LocationRecord") -> float:
        """Haversine distance to another record in meters."""
        return haversine_m(
            self.latitude, self.longitude, other.latitude, other.longitude
        )

    def seconds_since(self, other: "LocationRecord") -> float:
        return (self.timestamp - other.timestamp).total_seconds()

    def speed_kmh(
        self,
        other: "LocationRecord",
        max_gap_seconds: float = TimeConstants.MAX_SPEED_GAP,
    ) -> float | None:
        """
        Implied speed in km/h travelling from ``other`` to this record.

        Returns None unless ``other`` precedes this record by less than
        ``max_gap_seconds``.
        """
        elapsed = self.seconds_since(other)
        if 0 < elapsed < max_gap_seconds:
            return self.distance_to(other) / elapsed * GeoConstants.MS_TO_KMH
        return None

    def top_activities(self) -> list[Activity]:
        """Every estimate's activities flattened into one descending list."""
        result: list[Activity] = []
        for estimate in self.activities:
            result.extend(estimate.top_activities())
        return sorted(result, key=lambda a: a.confidence, reverse=True)

    def merged_activities(self) -> dict[ActivityType, int]:
        """Confidence summed per type over all estimates, highest first."""
        totals: dict[ActivityType, int] = {}
        for estimate in self.activities:
            for activity in estimate.activities:
                totals[activity.activity_type] = (
                    totals.get(activity.activity_type, 0) + activity.confidence
                )
        return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))

    def top_merged_activity_type(self) -> ActivityType:
        merged = self.merged_activities()
        return next(iter(merged), ActivityType.UNKNOWN)


class PipelineSummary(BaseModel):
    """Record counts collected across the pipeline stages."""

    parsed: int = Field(0, description="Records decoded successfully")
    skipped: int = Field(0, description="Malformed records skipped by the decoder")
    out_of_range: int = Field(0, description="Records outside the date range")
    loaded: int = Field(0, description="Records that passed the date/limit window")
    removed_outliers: int = Field(0, description="Records removed by velocity")
    removed_by_distance: int = Field(0, description="Records outside the radius")
    removed_by_activity: int = Field(
        0, description="Records not matching the activity pattern"
    )
    returned: int = Field(0, description="Records in the final result")
    track_length_m: float = Field(
        0.0, description="Haversine length of the returned track in meters"
    )
