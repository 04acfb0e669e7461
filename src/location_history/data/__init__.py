"""
Data access layer.

This package contains modules for streaming and decoding Takeout location records.
"""

from .decoder import RecordDecoder
from .stream import JsonArrayReader, iter_json_array

__all__ = [
    "JsonArrayReader",
    "RecordDecoder",
    "iter_json_array",
]
