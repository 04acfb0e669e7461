"""
Base classes and protocols for record filters.

Defines the interface that all pipeline filter stages follow.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Protocol

from ..models import LocationRecord
from ..settings import Settings

logger = logging.getLogger(__name__)


class RecordFilterProtocol(Protocol):
    """Protocol defining the interface for record filters."""

    removed: int

    def apply(self, records: Iterable[LocationRecord]) -> Iterator[LocationRecord]:
        """
        Lazily filter a sequence of records.

        Args:
            records: Records in chronological order

        Returns:
            Iterator over the retained records
        """
        ...


class BaseRecordFilter(ABC):
    """
    Abstract base class for record filters.

    Each call to ``apply`` produces a derived sequence; the input is never
    modified. ``kept`` and ``removed`` count the records seen by the most
    recent ``apply`` and are updated as the result is consumed.
    """

    name: str = "filter"

    def __init__(self, settings: Settings):
        """
        Initialize filter with settings.

        Args:
            settings: Application settings containing thresholds and configuration
        """
        self.settings = settings
        self.kept = 0
        self.removed = 0

    @abstractmethod
    def keep(self, record: LocationRecord) -> bool:
        """
        Decide whether a record is retained.

        Args:
            record: The next record in the sequence

        Returns:
            True to retain the record
        """
        raise NotImplementedError("Subclasses must implement keep()")

    def reset(self) -> None:
        """Clear counters and any per-sequence state."""
        self.kept = 0
        self.removed = 0

    def apply(self, records: Iterable[LocationRecord]) -> Iterator[LocationRecord]:
        self.reset()
        for record in records:
            if self.keep(record):
                self.kept += 1
                yield record
            else:
                self.removed += 1
        logger.debug(f"{self.name}: kept {self.kept}, removed {self.removed}")

    def filter(self, records: Iterable[LocationRecord]) -> list[LocationRecord]:
        """Eager variant of ``apply``."""
        return list(self.apply(records))
