"""
Date range and record-limit stages.

These run while the file is being read, so that an exhausted record limit
stops reading altogether.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, datetime

from ..constants import DateFormats
from ..exceptions import DateRangeError, ValidationError
from ..models import LocationRecord
from ..settings import Settings
from .base import BaseRecordFilter

logger = logging.getLogger(__name__)


def parse_date_argument(value: str) -> date:
    """
    Parse a start/end date argument.

    Accepts ``YY_MM_DD``, ``YYYY-MM-DD`` and ``YYYYMMDD``.

    Raises:
        DateRangeError: If the value matches none of the formats
    """
    cleaned = value.strip()
    for fmt in DateFormats.ACCEPTED:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise DateRangeError(
        f"Invalid date '{value}'. Use YY_MM_DD, YYYY-MM-DD or YYYYMMDD."
    )


def validate_date_range(start: date | None, end: date | None) -> None:
    """Raise DateRangeError unless ``start`` is before ``end``."""
    if start is not None and end is not None and start >= end:
        raise DateRangeError(
            f"Start date {start.isoformat()} must be before end date {end.isoformat()}"
        )


class DateRangeFilter(BaseRecordFilter):
    """
    Keeps records whose UTC calendar date lies in ``[start, end)``.

    Either bound may be omitted.
    """

    name = "date range"

    def __init__(
        self,
        settings: Settings,
        start: date | None = None,
        end: date | None = None,
    ):
        super().__init__(settings)
        validate_date_range(start, end)
        self.start = start
        self.end = end

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def keep(self, record: LocationRecord) -> bool:
        day = record.timestamp.date()
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day >= self.end:
            return False
        return True


class RecordLimit:
    """Passes through at most ``limit`` records, then stops pulling input."""

    def __init__(self, limit: int | None = None):
        if limit is not None and limit < 1:
            raise ValidationError(f"Record limit must be positive, got {limit}")
        self.limit = limit
        self.taken = 0

    @property
    def reached(self) -> bool:
        return self.limit is not None and self.taken >= self.limit

    def apply(self, records: Iterable[LocationRecord]) -> Iterator[LocationRecord]:
        self.taken = 0
        if self.limit is None:
            for record in records:
                self.taken += 1
                yield record
            return

        for record in records:
            self.taken += 1
            yield record
            if self.reached:
                logger.debug(f"Record limit of {self.limit} reached")
                return
