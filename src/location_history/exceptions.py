"""
Custom exceptions for the location-history package.

This module defines all custom exceptions used throughout the application,
providing clear error hierarchies and specific error types for different scenarios.
"""


class LocationHistoryError(Exception):
    """Base exception for all location-history errors."""


class ConfigurationError(LocationHistoryError):
    """Raised when there is an issue with configuration settings."""


class DataLoadError(LocationHistoryError):
    """Raised when a records file cannot be opened or read."""


class DecodeError(LocationHistoryError):
    """Raised when the top-level JSON structure is not the expected array."""


class ValidationError(LocationHistoryError):
    """Raised when user-supplied arguments fail validation."""


class DateRangeError(ValidationError):
    """Raised when a start/end date is malformed or the range is empty."""


class ActivityTypeError(ValidationError):
    """Raised when an activity pattern matches no known activity type."""


class ProcessingError(LocationHistoryError):
    """Raised when a pipeline stage fails."""
