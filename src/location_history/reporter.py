"""
Text reporting for pipeline results.

Renders the per-record table, the activity legend, the month/week/day
activity timeline and the summary counts, and exports records to CSV.
"""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

import click
import pandas as pd

from .analysis import GLYPHS, MonthTimeline, build_timeline, list_activities
from .constants import CSVConstants, ReportConstants
from .models import ActivityType, LocationRecord, PipelineSummary
from .pipeline import PipelineResult
from .settings import Settings

logger = logging.getLogger(__name__)

GLYPH_STYLES: dict[ActivityType, dict[str, object]] = {
    ActivityType.IN_VEHICLE: {"fg": "bright_blue", "bg": "blue"},
    ActivityType.EXITING_VEHICLE: {"fg": "bright_blue", "bg": "blue"},
    ActivityType.ON_FOOT: {"fg": "bright_green", "bg": "green"},
    ActivityType.WALKING: {"fg": "bright_green", "bg": "green"},
    ActivityType.RUNNING: {"fg": "green", "bg": "bright_green"},
    ActivityType.ON_BICYCLE: {"fg": "bright_yellow", "bg": "yellow"},
    ActivityType.STILL: {"fg": "white"},
    ActivityType.TILTING: {"dim": True},
    ActivityType.UNKNOWN: {"dim": True},
}

TABLE_COLUMNS = [
    "timestamp",
    "latitude",
    "longitude",
    "accuracy",
    "altitude",
    "activity",
]


def styled_glyph(activity_type: ActivityType) -> str:
    """The timeline glyph for an activity type, with terminal colours."""
    return click.style(GLYPHS[activity_type], **GLYPH_STYLES[activity_type])


def records_to_frame(records: Sequence[LocationRecord]) -> pd.DataFrame:
    """
    Flatten records into a DataFrame, one row per record.

    The ``activity`` and ``confidence`` columns hold the top-ranked type of
    the most recent estimate (empty when the record has none).
    """
    rows = []
    for record in records:
        estimate = record.latest_activity()
        top = estimate.top_activity() if estimate is not None else None
        rows.append(
            {
                "timestamp": record.timestamp,
                "latitude": record.latitude,
                "longitude": record.longitude,
                "accuracy": record.accuracy,
                "altitude": record.altitude,
                "activity": top.activity_type.value if top else None,
                "confidence": top.confidence if top else None,
            }
        )
    columns = TABLE_COLUMNS + ["confidence"]
    df = pd.DataFrame(rows, columns=columns)
    for col in ["accuracy", "altitude", "confidence"]:
        df[col] = df[col].astype("Int64")
    return df


class Reporter:
    """
    Writes a human-readable report of a pipeline result.

    Output goes through ``echo`` (``click.echo`` by default) so tests can
    capture it.
    """

    def __init__(self, settings: Settings, echo: Callable[[str], None] = click.echo):
        """
        Initialize the reporter.

        Args:
            settings: Application settings (table size, hidden timeline types)
            echo: Line writer
        """
        self.settings = settings
        self.echo = echo

    def render_table(
        self, records: Sequence[LocationRecord], rows: int | None = None
    ) -> str:
        """Render up to ``rows`` records as a text table."""
        rows = self.settings.table_rows if rows is None else rows
        if not records or rows == 0:
            return ""

        df = records_to_frame(records[:rows])
        df["timestamp"] = df["timestamp"].map(
            lambda ts: ts.strftime("%Y-%m-%d %H:%M:%S")
        )
        df["latitude"] = df["latitude"].map(lambda v: f"{v:.7f}")
        df["longitude"] = df["longitude"].map(lambda v: f"{v:.7f}")
        df["activity"] = [
            f"{name} ({confidence}%)" if pd.notna(name) else None
            for name, confidence in zip(df["activity"], df["confidence"], strict=True)
        ]
        table = df[TABLE_COLUMNS].astype(object)
        table = table.where(table.notna(), ReportConstants.MISSING_VALUE)
        text = table.to_string(index=False)

        if len(records) > rows:
            text += f"\n... {len(records) - rows} more"
        return text

    def render_summary(self, summary: PipelineSummary) -> list[str]:
        """Summary lines: returned/parsed counts and per-stage removals."""
        lines = [f"{summary.returned} returned, {summary.parsed} parsed"]
        details = [
            ("skipped (malformed)", summary.skipped),
            ("outside date range", summary.out_of_range),
            ("removed as outliers", summary.removed_outliers),
            ("removed by distance", summary.removed_by_distance),
            ("removed by activity", summary.removed_by_activity),
        ]
        lines.extend(f"  {label}: {count}" for label, count in details if count)
        if summary.returned > 1:
            lines.append(f"  track length: {summary.track_length_m / 1000:.1f} km")
        return lines

    def render_legend(self, activities: Sequence[ActivityType]) -> list[str]:
        """Two-column legend mapping glyphs to activity names."""
        if not activities:
            return []
        pad = max(len(a.value) for a in activities)
        columns = ReportConstants.LEGEND_COLUMNS
        lines = [click.style(f"{'LEGEND':^32}", fg="black", bg="white", bold=True)]
        for start in range(0, len(activities), columns):
            chunk = activities[start : start + columns]
            cells = [f"{styled_glyph(a)} {a.value:<{pad}}" for a in chunk]
            lines.append("  ".join(cells).rstrip())
        return lines

    def render_timeline(self, months: Sequence[MonthTimeline]) -> list[str]:
        """Month headers, ISO week rows and one glyph row per day."""
        lines: list[str] = []
        for month in months:
            header = f"{month.year:<4} " + click.style(
                month.first_day.strftime("%B"), bold=True
            )
            lines.append("")
            lines.append(click.style(header, fg="black", bg="white"))
            for week in month.weeks:
                lines.append(f"{'W':>6} " + click.style(f"{week.iso_week:02d}", bold=True))
                for day in week.days:
                    glyphs = "".join(styled_glyph(t) for t in day.changes)
                    lines.append(f"{day.day.strftime('%a'):>10} {glyphs}")
        return lines

    def report(
        self,
        result: PipelineResult,
        rows: int | None = None,
        show_timeline: bool = True,
        show_legend: bool = True,
    ) -> None:
        """Write the complete report for a pipeline result."""
        records = result.records

        if show_timeline and records:
            hidden = self.settings.timeline_hidden_activities
            for line in self.render_timeline(build_timeline(records, hidden)):
                self.echo(line)
            self.echo("")

        if show_legend:
            for line in self.render_legend(list_activities(records)):
                self.echo(line)
            self.echo("")

        table = self.render_table(records, rows)
        if table:
            self.echo(table)
            self.echo("")

        for line in self.render_summary(result.summary):
            self.echo(line)


def export_csv(records: Sequence[LocationRecord], path: Path) -> Path:
    """
    Save records to a semicolon-separated CSV file.

    Args:
        records: Records to export
        path: Destination file; parent directories are created

    Returns:
        The path written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    df = records_to_frame(records)
    df["timestamp"] = df["timestamp"].map(lambda ts: ts.isoformat())
    df.to_csv(
        path,
        index=False,
        sep=CSVConstants.DEFAULT_SEPARATOR,
        encoding=CSVConstants.DEFAULT_ENCODING,
    )
    logger.info(f"Exported {len(df)} records to {path}")
    return path
