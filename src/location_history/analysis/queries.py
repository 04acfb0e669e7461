"""
Queries over a chronologically ordered collection of records.
"""

from bisect import bisect_left
from collections.abc import Iterable, Sequence
from datetime import datetime

from ..models import ActivityType, LocationRecord


def sort_chronological(records: Iterable[LocationRecord]) -> list[LocationRecord]:
    """Return the records sorted by timestamp (stable for equal timestamps)."""
    return sorted(records, key=lambda record: record.timestamp)


def average_interval(records: Sequence[LocationRecord]) -> float:
    """Mean number of seconds between consecutive records (0 for fewer than two)."""
    if len(records) < 2:
        return 0.0
    span = records[-1].seconds_since(records[0])
    return span / (len(records) - 1)


def find_closest(
    records: Sequence[LocationRecord], when: datetime
) -> LocationRecord | None:
    """
    Find the record nearest in time to ``when``.

    Args:
        records: Records sorted by timestamp
        when: Aware datetime to look up

    Returns:
        The nearest record, or None if ``when`` falls outside the span of
        ``records``
    """
    if not records:
        return None
    if when < records[0].timestamp or when > records[-1].timestamp:
        return None

    index = bisect_left(records, when, key=lambda record: record.timestamp)
    candidate = records[index]
    if candidate.timestamp == when or index == 0:
        return candidate

    previous = records[index - 1]
    if when - previous.timestamp <= candidate.timestamp - when:
        return previous
    return candidate


def list_activities(records: Iterable[LocationRecord]) -> list[ActivityType]:
    """Unique activity types present in any estimate, sorted by name."""
    seen: set[ActivityType] = set()
    for record in records:
        for estimate in record.activities:
            seen.update(activity.activity_type for activity in estimate.activities)
    return sorted(seen, key=lambda activity_type: activity_type.value)
