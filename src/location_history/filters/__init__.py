"""
Record filter stages.

Each stage consumes a lazy sequence of records and produces another:
- window: date range and record limit, applied while reading
- outliers: velocity-based outlier removal
- distance: radius around a centre point
- activity: activity-type pattern matching
"""

from .activity import ActivityFilter, ActivityPattern, expand_braces
from .base import BaseRecordFilter
from .distance import DistanceFilter, validate_center
from .outliers import OutlierFilter
from .window import (
    DateRangeFilter,
    RecordLimit,
    parse_date_argument,
    validate_date_range,
)

__all__ = [
    "ActivityFilter",
    "ActivityPattern",
    "BaseRecordFilter",
    "DateRangeFilter",
    "DistanceFilter",
    "OutlierFilter",
    "RecordLimit",
    "expand_braces",
    "parse_date_argument",
    "validate_center",
    "validate_date_range",
]
