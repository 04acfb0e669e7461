"""location-history - a package for parsing Google Takeout location history."""

__version__ = "0.3.0"

from . import analysis, constants, data, exceptions, filters, models
from .analysis import build_timeline, find_closest, list_activities
from .data import RecordDecoder, iter_json_array
from .filters import (
    ActivityFilter,
    ActivityPattern,
    DateRangeFilter,
    DistanceFilter,
    OutlierFilter,
    RecordLimit,
)
from .models import (
    Activity,
    ActivityEstimate,
    ActivityType,
    LocationRecord,
    PipelineSummary,
)
from .pipeline import Pipeline, PipelineResult
from .reporter import Reporter, export_csv


def get_version() -> str:
    """Get the current version of location_history."""
    return __version__


def get_package_info() -> dict[str, str]:
    """Get package information including name and version."""
    return {
        "name": "location-history",
        "version": __version__,
        "description": "Parse and filter Google Takeout location history",
    }


__all__ = [
    # Version & Info
    "get_version",
    "get_package_info",
    # Models
    "Activity",
    "ActivityEstimate",
    "ActivityType",
    "LocationRecord",
    "PipelineSummary",
    # Data Layer
    "RecordDecoder",
    "iter_json_array",
    # Filters
    "ActivityFilter",
    "ActivityPattern",
    "DateRangeFilter",
    "DistanceFilter",
    "OutlierFilter",
    "RecordLimit",
    # Analysis Layer
    "build_timeline",
    "find_closest",
    "list_activities",
    # Pipeline & Reporting
    "Pipeline",
    "PipelineResult",
    "Reporter",
    "export_csv",
    # Modules
    "analysis",
    "constants",
    "data",
    "exceptions",
    "filters",
    "models",
]
