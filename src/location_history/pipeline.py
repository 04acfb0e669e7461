"""
Record-processing pipeline.

Decode -> date/limit window -> outlier filter -> distance filter ->
activity filter. Every stage is a generator, so records flow through one at a
time; the window output is materialised only when ``sort_records`` is on.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import BinaryIO, TextIO

import numpy as np

from .analysis import sort_chronological
from .data import RecordDecoder
from .exceptions import LocationHistoryError, ProcessingError
from .filters import (
    ActivityFilter,
    ActivityPattern,
    DateRangeFilter,
    DistanceFilter,
    OutlierFilter,
    RecordLimit,
)
from .geo import track_length_m
from .models import LocationRecord, PipelineSummary
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Final records together with the per-stage counts."""

    records: list[LocationRecord] = field(default_factory=list)
    summary: PipelineSummary = field(default_factory=PipelineSummary)


class Pipeline:
    """
    Orchestrates the record-processing stages.

    Arguments are validated when ``run`` is called, before the input file is
    opened, so a bad date range or activity pattern never costs a read.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the pipeline.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)

    def run(
        self,
        source: Path | TextIO | BinaryIO,
        start_date: date | None = None,
        end_date: date | None = None,
        activity: str | ActivityPattern | None = None,
        record_limit: int | None = None,
        center: tuple[float, float, float] | None = None,
        min_confidence: int | None = None,
    ) -> PipelineResult:
        """
        Execute the pipeline over a Records.json file or handle.

        Args:
            source: Path to Records.json, or an open text or binary handle
            start_date: First UTC date to keep (inclusive)
            end_date: UTC date to stop at (exclusive)
            activity: Activity pattern to keep, e.g. ``WALKING`` or ``ON_*``
            record_limit: Stop reading after this many in-range records
            center: ``(latitude, longitude, radius_m)`` to keep records near
            min_confidence: Minimum confidence for the activity filter

        Returns:
            PipelineResult with the final records and counts

        Raises:
            ValidationError: If an argument is invalid (nothing is read)
            DataLoadError: If the input cannot be opened
            DecodeError: If the top-level JSON is not a records array
            ProcessingError: If a stage fails unexpectedly
        """
        date_filter = DateRangeFilter(self.settings, start_date, end_date)
        limit = RecordLimit(record_limit)
        outlier_filter = OutlierFilter(self.settings)
        distance_filter = (
            DistanceFilter(self.settings, *center) if center is not None else None
        )
        activity_filter = (
            ActivityFilter(self.settings, activity, min_confidence)
            if activity is not None
            else None
        )

        decoder = RecordDecoder(self.settings)
        stream = decoder.decode(source)
        try:
            windowed: Iterable[LocationRecord] = limit.apply(date_filter.apply(stream))
            if self.settings.sort_records:
                windowed = sort_chronological(windowed)

            records: Iterable[LocationRecord] = outlier_filter.apply(windowed)
            if distance_filter is not None:
                records = distance_filter.apply(records)
            if activity_filter is not None:
                records = activity_filter.apply(records)

            final = list(records)
        except LocationHistoryError:
            raise
        except Exception as e:
            self.logger.error(f"Pipeline failed: {e}")
            raise ProcessingError(f"Pipeline execution failed: {e}") from e
        finally:
            stream.close()

        self.logger.info(f"{limit.taken} loaded, {decoder.parsed} parsed")
        self.logger.debug(f"Removed {outlier_filter.removed} outliers by velocity")
        if distance_filter is not None:
            self.logger.info(
                f"Removed {distance_filter.removed} locations outside "
                f"{distance_filter.radius_m:.0f} m"
            )
        if activity_filter is not None:
            self.logger.info(
                f"Removed {activity_filter.removed} locations by activity type"
            )

        summary = PipelineSummary(
            parsed=decoder.parsed,
            skipped=decoder.skipped,
            out_of_range=date_filter.removed,
            loaded=limit.taken,
            removed_outliers=outlier_filter.removed,
            removed_by_distance=distance_filter.removed if distance_filter else 0,
            removed_by_activity=activity_filter.removed if activity_filter else 0,
            returned=len(final),
            track_length_m=self._track_length(final),
        )
        return PipelineResult(records=final, summary=summary)

    @staticmethod
    def _track_length(records: list[LocationRecord]) -> float:
        latitudes = np.fromiter((r.latitude for r in records), dtype=float)
        longitudes = np.fromiter((r.longitude for r in records), dtype=float)
        return track_length_m(latitudes, longitudes)


def run_pipeline(records_path: str, config_path: str | None = None) -> PipelineResult:
    """
    Run the pipeline over a records file with settings from a config file.

    Args:
        records_path: Path to Records.json
        config_path: Optional path to a YAML configuration file
    """
    settings = load_settings(Path(config_path) if config_path else None)
    return Pipeline(settings).run(Path(records_path))
