"""
Command-line interface for the location-history package.

This module provides the ``location-history`` command for loading, filtering
and summarising Google Takeout location history exports.
"""

import logging
from collections import Counter
from datetime import date
from pathlib import Path

import click

from .data import RecordDecoder
from .exceptions import LocationHistoryError, ValidationError
from .filters import (
    ActivityPattern,
    parse_date_argument,
    validate_center,
    validate_date_range,
)
from .pipeline import Pipeline
from .reporter import Reporter, export_csv, styled_glyph
from .settings import load_settings


# Configure basic logging
def configure_logging(verbose: bool = False) -> None:
    """Configure logging with appropriate level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def _date_option(ctx: click.Context, param: click.Parameter, value: str | None):
    if value is None:
        return None
    try:
        return parse_date_argument(value)
    except ValidationError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _activity_option(ctx: click.Context, param: click.Parameter, value: str | None):
    if value is None:
        return None
    try:
        return ActivityPattern(value)
    except ValidationError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _center_option(
    ctx: click.Context, param: click.Parameter, value: tuple[float, float, float] | None
):
    if not value:
        return None
    try:
        validate_center(*value)
    except ValidationError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e
    return value


records_path_argument = click.argument(
    "records_json_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
config_option = click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)


@click.group()
def main():
    """
    Parse Google Takeout location history.

    Streams a Records.json export, removes velocity outliers, optionally
    filters by date, place and activity, and prints a report.
    """


@main.command()
@config_option
@click.option(
    "--verbose/--quiet",
    default=False,
    help="Enable verbose output",
)
@click.option(
    "-s",
    "--start-date",
    callback=_date_option,
    help="Keep records on or after this date (YY_MM_DD or YYYY-MM-DD)",
)
@click.option(
    "-e",
    "--end-date",
    callback=_date_option,
    help="Keep records before this date (YY_MM_DD or YYYY-MM-DD)",
)
@click.option(
    "-a",
    "--activity-type",
    callback=_activity_option,
    help="Activity pattern to keep, e.g. WALKING, ON_* or {ON_FOOT,STILL}",
)
@click.option(
    "-n",
    "--record-limit",
    type=click.IntRange(min=1),
    help="Stop reading after this many in-range records",
)
@click.option(
    "-c",
    "--center",
    type=float,
    nargs=3,
    default=None,
    callback=_center_option,
    metavar="LAT LON RADIUS",
    help="Keep records within RADIUS meters of LAT/LON",
)
@click.option(
    "--min-confidence",
    type=click.IntRange(0, 100),
    help="Keep records whose activity has a confidence above this "
    "(default: top-ranked activity only)",
)
@click.option(
    "--max-speed",
    type=click.FloatRange(min=0, min_open=True),
    help="Outlier speed threshold in km/h (overrides config)",
)
@click.option(
    "--show",
    "rows",
    type=click.IntRange(min=0),
    help="Number of records to print in the table (overrides config)",
)
@click.option(
    "--timeline/--no-timeline",
    default=True,
    help="Print the activity timeline",
)
@click.option(
    "--legend/--no-legend",
    default=True,
    help="Print the activity legend",
)
@click.option(
    "--export",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the returned records to this CSV file",
)
@records_path_argument
def load(
    config: Path | None,
    verbose: bool,
    start_date: date | None,
    end_date: date | None,
    activity_type: ActivityPattern | None,
    record_limit: int | None,
    center: tuple[float, float, float] | None,
    min_confidence: int | None,
    max_speed: float | None,
    rows: int | None,
    timeline: bool,
    legend: bool,
    export: Path | None,
    records_json_path: Path,
) -> None:
    """
    Load a Records.json file and report the filtered locations.
    """
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        validate_date_range(start_date, end_date)
    except ValidationError as e:
        raise click.UsageError(str(e)) from e
    if min_confidence is not None and activity_type is None:
        raise click.UsageError("--min-confidence requires -a/--activity-type")

    try:
        settings = load_settings(config)

        # Override settings if values provided
        if max_speed is not None:
            settings.max_speed_kmh = max_speed
        if rows is not None:
            settings.table_rows = rows

        pipeline = Pipeline(settings)
        result = pipeline.run(
            records_json_path,
            start_date=start_date,
            end_date=end_date,
            activity=activity_type,
            record_limit=record_limit,
            center=center,
            min_confidence=min_confidence,
        )

        Reporter(settings).report(
            result, show_timeline=timeline, show_legend=legend
        )

        if export is not None:
            export_csv(result.records, export)

    except LocationHistoryError as e:
        logger.error(f"Processing failed: {str(e)}")
        raise click.Abort() from e
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}")
        raise click.Abort() from e


@main.command()
@config_option
@records_path_argument
def activities(config: Path | None, records_json_path: Path) -> None:
    """
    List the activity types present in a Records.json file.

    Counts how many records carry each type in any of their estimates.
    """
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(config)
        decoder = RecordDecoder(settings)

        counts: Counter = Counter()
        for record in decoder.decode(records_json_path):
            types = {
                activity.activity_type
                for estimate in record.activities
                for activity in estimate.activities
            }
            counts.update(types)

        click.echo(f"{decoder.parsed} parsed, {decoder.skipped} skipped")
        for activity_type, count in sorted(counts.items(), key=lambda i: i[0].value):
            click.echo(f"{styled_glyph(activity_type)} {activity_type.value:<16}{count:>10}")

    except LocationHistoryError as e:
        logger.error(f"Listing failed: {str(e)}")
        raise click.Abort() from e
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}")
        raise click.Abort() from e


if __name__ == "__main__":
    main()
