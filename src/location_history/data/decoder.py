"""
Record decoding.

This module turns the raw elements of a Records.json array into typed
``LocationRecord`` objects, skipping and counting the ones that do not decode.
"""

import io
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any, BinaryIO, Protocol, TextIO

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import DataLoadError
from ..models import LocationRecord
from ..settings import Settings
from .stream import iter_json_array

logger = logging.getLogger(__name__)


class RecordDecoderProtocol(Protocol):
    """Protocol for record decoders."""

    parsed: int
    skipped: int

    def decode(
        self, source: Path | TextIO | BinaryIO
    ) -> Iterator[LocationRecord]:
        """Lazily decode location records."""
        ...


class RecordDecoder:
    """
    Streams ``LocationRecord`` objects out of a Takeout export.

    Decoding is a single forward pass: the returned iterator cannot be
    restarted. Counters are updated as the iterator is consumed, so they
    reflect only the part of the file that has been read.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the decoder.

        Args:
            settings: Application settings (records key, read chunk size)
        """
        self.settings = settings
        self.parsed = 0
        self.skipped = 0
        self.logger = logging.getLogger(__name__)

    def decode(
        self, source: Path | TextIO | BinaryIO
    ) -> Iterator[LocationRecord]:
        """
        Decode records from a file path or an open handle.

        Args:
            source: Path to a Records.json file, or a text or binary handle.
                Binary input is decoded as UTF-8.

        Yields:
            LocationRecord for every element that validates

        Raises:
            DataLoadError: If the file cannot be opened
            DecodeError: If the top-level JSON is not a records array or the
                input is not valid UTF-8
        """
        if isinstance(source, Path):
            yield from self._decode_path(source)
        elif isinstance(source.read(0), bytes):
            yield from self._decode_binary(source)
        else:
            yield from self._decode_handle(source)

    def _decode_path(self, path: Path) -> Iterator[LocationRecord]:
        if not path.exists():
            raise DataLoadError(f"Records file not found: {path}")

        self.logger.info(f"Loading records from {path}")
        try:
            handle = open(path, encoding="utf-8-sig")
        except OSError as e:
            raise DataLoadError(f"Failed to open records file {path}: {e}") from e

        with handle:
            yield from self._decode_handle(handle)

    def _decode_binary(self, handle: BinaryIO) -> Iterator[LocationRecord]:
        text = io.TextIOWrapper(handle, encoding="utf-8-sig")
        try:
            yield from self._decode_handle(text)
        finally:
            # leave the caller's handle open
            text.detach()

    def _decode_handle(self, handle: TextIO) -> Iterator[LocationRecord]:
        elements = iter_json_array(
            handle,
            key=self.settings.records_key,
            chunk_size=self.settings.read_chunk_size,
        )
        for index, element in enumerate(elements):
            record = self.decode_element(element, index)
            if record is None:
                self.skipped += 1
                continue
            self.parsed += 1
            yield record

        self.logger.info(f"Decoded {self.parsed} records, skipped {self.skipped}")

    def decode_element(self, element: Any, index: int = 0) -> LocationRecord | None:
        """
        Validate a single raw array element.

        Returns:
            The decoded record, or None when the element is malformed
        """
        if not isinstance(element, dict):
            self.logger.debug(
                f"Skipping element {index}: expected an object, "
                f"got {type(element).__name__}"
            )
            return None
        try:
            return LocationRecord.model_validate(element)
        except PydanticValidationError as e:
            self.logger.debug(
                f"Skipping element {index}: {e.error_count()} validation error(s)"
            )
            return None
