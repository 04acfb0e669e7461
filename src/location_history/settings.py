"""Application settings and configuration management."""

from pathlib import Path
from typing import Annotated

import yaml
from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .constants import (
    ConfidenceBounds,
    OutlierThresholds,
    ReportConstants,
    TakeoutConstants,
    TimeConstants,
)
from .exceptions import ConfigurationError
from .models import ActivityType


class Settings(BaseSettings):
    """
    Application settings for location-history.

    Settings are loaded in the following order of precedence (highest to lowest):
    1. Values from a YAML config file passed to ``load_settings``
    2. Environment variables (e.g., LOCATION_HISTORY_MAX_SPEED_KMH)
    3. .env file (if found)
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCATION_HISTORY_", env_file=".env", extra="ignore"
    )

    # --- Input ---
    records_key: str = TakeoutConstants.RECORDS_KEY  # Key holding the records array
    read_chunk_size: int = Field(TakeoutConstants.READ_CHUNK_SIZE, gt=0)
    sort_records: bool = True  # Takeout files are not guaranteed to be sorted

    # --- Outlier Detection ---
    max_speed_kmh: float = Field(OutlierThresholds.MAX_SPEED_KMH, gt=0)
    max_gap_seconds: float = Field(TimeConstants.MAX_SPEED_GAP, gt=0)

    # --- Activity Filter ---
    # None keeps records whose top-ranked activity matches the pattern
    min_confidence: int | None = Field(
        None, ge=ConfidenceBounds.MIN, le=ConfidenceBounds.MAX
    )

    # --- Reporting ---
    table_rows: int = Field(ReportConstants.TABLE_ROWS, ge=0)
    # Comma-separated names in the environment, e.g. "STILL,UNKNOWN"
    timeline_hidden_activities: Annotated[list[ActivityType], NoDecode] = [
        ActivityType.UNKNOWN,
        ActivityType.STILL,
        ActivityType.TILTING,
    ]

    @field_validator("timeline_hidden_activities", mode="before")
    @classmethod
    def parse_activity_names(cls, v):
        """Accept activity names in any casing."""
        if isinstance(v, str):
            v = [name for name in v.split(",") if name.strip()]
        return [ActivityType.parse(name) for name in v]


def load_settings(config_file: Path | None = None) -> Settings:
    """Load settings from a YAML file, environment variables, and defaults."""
    if config_file:
        try:
            with open(config_file, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to read config file {config_file}: {e}"
            ) from e

        if not isinstance(yaml_settings, dict):
            raise ConfigurationError(
                f"Config file {config_file} must contain a mapping"
            )

        # Create a Settings object from YAML, then merge with env vars/defaults
        try:
            return Settings(**yaml_settings)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid settings in config file {config_file}: {e}"
            ) from e

    return Settings()
