"""
Activity timeline.

Groups records by month, ISO week and day, and reduces each day to the
sequence of changes in its dominant activity. Each change is later shown as a
single glyph, which makes runs of related activities easy to spot.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from itertools import groupby

from ..models import ActivityType, LocationRecord

GLYPHS: dict[ActivityType, str] = {
    ActivityType.IN_VEHICLE: "$",
    ActivityType.EXITING_VEHICLE: "^",
    ActivityType.ON_FOOT: "#",
    ActivityType.WALKING: "#",
    ActivityType.RUNNING: "#",
    ActivityType.ON_BICYCLE: "%",
    ActivityType.STILL: ".",
    ActivityType.TILTING: "/",
    ActivityType.UNKNOWN: "?",
}


@dataclass
class DayTimeline:
    """Activity changes within one day."""

    day: date
    changes: list[ActivityType] = field(default_factory=list)

    @property
    def glyphs(self) -> str:
        return "".join(GLYPHS[activity_type] for activity_type in self.changes)


@dataclass
class WeekTimeline:
    """Days of one ISO week (within one month)."""

    iso_year: int
    iso_week: int
    days: list[DayTimeline] = field(default_factory=list)


@dataclass
class MonthTimeline:
    """Weeks of one calendar month."""

    year: int
    month: int
    weeks: list[WeekTimeline] = field(default_factory=list)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)


def day_changes(
    records: Iterable[LocationRecord], hidden: Iterable[ActivityType] = ()
) -> list[ActivityType]:
    """
    Dominant-activity changes across a day's records.

    The dominant activity of a record is the type with the highest summed
    confidence over all of its estimates. Repeats are collapsed; hidden types
    still end a run but are not emitted.
    """
    hidden_types = set(hidden)
    changes: list[ActivityType] = []
    last_type = ActivityType.UNKNOWN
    for record in records:
        top_type = record.top_merged_activity_type()
        if top_type is last_type:
            continue
        last_type = top_type
        if top_type in hidden_types:
            continue
        changes.append(top_type)
    return changes


def build_timeline(
    records: Sequence[LocationRecord], hidden: Iterable[ActivityType] = ()
) -> list[MonthTimeline]:
    """
    Group chronologically ordered records into months, weeks and days.

    Args:
        records: Records sorted by timestamp
        hidden: Activity types left out of the day glyphs

    Returns:
        One MonthTimeline per calendar month that has records
    """
    hidden_types = list(hidden)
    months: list[MonthTimeline] = []

    for (year, month), month_records in groupby(
        records, key=lambda r: (r.timestamp.year, r.timestamp.month)
    ):
        month_timeline = MonthTimeline(year=year, month=month)
        for (iso_year, iso_week), week_records in groupby(
            month_records, key=lambda r: r.timestamp.isocalendar()[:2]
        ):
            week_timeline = WeekTimeline(iso_year=iso_year, iso_week=iso_week)
            for day, day_records in groupby(
                week_records, key=lambda r: r.timestamp.date()
            ):
                week_timeline.days.append(
                    DayTimeline(day=day, changes=day_changes(day_records, hidden_types))
                )
            month_timeline.weeks.append(week_timeline)
        months.append(month_timeline)

    return months
