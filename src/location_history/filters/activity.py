"""
Activity-type filtering.

Patterns are shell-style globs over activity-type names, with brace
alternatives, e.g. ``WALKING``, ``ON_*``, ``IN_*`` or ``{ON_FOOT,STILL}``.
"""

import re
from fnmatch import fnmatchcase

from ..exceptions import ActivityTypeError, ValidationError
from ..models import ActivityType, LocationRecord
from ..settings import Settings
from .base import BaseRecordFilter

_BRACES = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives into separate glob patterns."""
    match = _BRACES.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option.strip() + tail))
    return expanded


class ActivityPattern:
    """A glob pattern resolved against the known activity types."""

    def __init__(self, pattern: str):
        self.pattern = pattern.strip()
        alternatives = expand_braces(self.pattern.upper())
        self.types = frozenset(
            activity_type
            for activity_type in ActivityType
            if any(fnmatchcase(activity_type.value, alt) for alt in alternatives)
        )
        if not self.types:
            known = ", ".join(t.value for t in ActivityType)
            raise ActivityTypeError(
                f"Activity pattern '{pattern}' matches no activity type. "
                f"Known types: {known}"
            )

    def matches(self, activity_type: ActivityType) -> bool:
        return activity_type in self.types

    def __repr__(self) -> str:
        return f"ActivityPattern({self.pattern!r})"


class ActivityFilter(BaseRecordFilter):
    """
    Keeps records whose most recent activity estimate matches a pattern.

    Only the latest estimate attached to a record is consulted; records with
    no estimate are removed.

    With ``min_confidence`` unset, a record is kept when one of the estimate's
    top-ranked types (all types sharing the highest confidence) matches.
    With ``min_confidence`` set, a record is kept when a matching type is
    present with a confidence above it.
    """

    name = "activity"

    def __init__(
        self,
        settings: Settings,
        pattern: str | ActivityPattern,
        min_confidence: int | None = None,
    ):
        super().__init__(settings)
        self.pattern = (
            pattern if isinstance(pattern, ActivityPattern) else ActivityPattern(pattern)
        )
        if min_confidence is None:
            min_confidence = settings.min_confidence
        if min_confidence is not None and not 0 <= min_confidence <= 100:
            raise ValidationError(
                f"Minimum confidence must be between 0 and 100, got {min_confidence}"
            )
        self.min_confidence = min_confidence

    def keep(self, record: LocationRecord) -> bool:
        estimate = record.latest_activity()
        if estimate is None:
            return False

        if self.min_confidence is None:
            return any(self.pattern.matches(t) for t in estimate.top_ranked_types())

        return any(
            self.pattern.matches(activity.activity_type)
            and activity.confidence > self.min_confidence
            for activity in estimate.activities
        )
