"""
Analysis layer.

Collection queries and the activity timeline built from filtered records.
"""

from .queries import average_interval, find_closest, list_activities, sort_chronological
from .timeline import GLYPHS, DayTimeline, MonthTimeline, WeekTimeline, build_timeline

__all__ = [
    "GLYPHS",
    "DayTimeline",
    "MonthTimeline",
    "WeekTimeline",
    "average_interval",
    "build_timeline",
    "find_closest",
    "list_activities",
    "sort_chronological",
]
