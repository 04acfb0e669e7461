"""
Incremental JSON array reader.

Takeout exports are routinely larger than a gigabyte, so the records array is
read one element at a time from a bounded buffer instead of with
``json.load``. Elements themselves are decoded by the standard library
decoder; this module only walks the surrounding array/object punctuation.
"""

import json
import logging
import re
from collections.abc import Iterator
from typing import Any, TextIO

from ..constants import TakeoutConstants
from ..exceptions import DecodeError

logger = logging.getLogger(__name__)

_WHITESPACE = frozenset(" \t\n\r")
_SCALAR_END = re.compile(r"[\s,\]}:]")

# Upper bound for a single buffered element; a larger one means the file is
# not a records array (or is truncated mid-value).
MAX_ELEMENT_CHARS = 64 * 1024 * 1024


def _describe(char: str) -> str:
    return repr(char) if char else "end of input"


class JsonArrayReader:
    """
    Walks a JSON document from a text handle, one value at a time.

    The reader keeps only the unconsumed tail of the input in memory. Values
    are decoded with ``json.JSONDecoder.raw_decode``; when a value runs past
    the end of the buffer, another chunk is read and decoding is retried.
    """

    def __init__(
        self, handle: TextIO, chunk_size: int = TakeoutConstants.READ_CHUNK_SIZE
    ):
        self.handle = handle
        self.chunk_size = chunk_size
        self.buffer = ""
        self.pos = 0
        self.consumed = 0  # characters dropped from the front of the buffer
        self.eof = False
        self._decoder = json.JSONDecoder()

    @property
    def offset(self) -> int:
        """Character offset of the read position in the whole input."""
        return self.consumed + self.pos

    def _fill(self) -> bool:
        """Append the next chunk to the buffer. Returns False at end of input."""
        if self.eof:
            return False
        try:
            chunk = self.handle.read(self.chunk_size)
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"Invalid {e.encoding} text near offset {self.offset}: {e.reason}"
            ) from e
        if not chunk:
            self.eof = True
            return False
        self.consumed += self.pos
        self.buffer = self.buffer[self.pos :] + chunk
        self.pos = 0
        if len(self.buffer) > MAX_ELEMENT_CHARS:
            raise DecodeError(
                f"JSON value at offset {self.offset} exceeds "
                f"{MAX_ELEMENT_CHARS} characters"
            )
        return True

    def peek(self) -> str:
        """Return the next non-whitespace character without consuming it."""
        while True:
            while self.pos < len(self.buffer) and self.buffer[self.pos] in _WHITESPACE:
                self.pos += 1
            if self.pos < len(self.buffer):
                return self.buffer[self.pos]
            if not self._fill():
                return ""

    def expect(self, char: str) -> None:
        """Consume ``char`` or raise DecodeError."""
        found = self.peek()
        if found != char:
            raise DecodeError(
                f"Expected {char!r} at offset {self.offset}, "
                f"found {_describe(found)}"
            )
        self.pos += 1

    def _buffer_scalar(self) -> None:
        """Read until a bare number or literal is followed by a delimiter."""
        while not _SCALAR_END.search(self.buffer, self.pos) and self._fill():
            pass

    def value(self) -> Any:
        """Decode and consume the next complete JSON value."""
        first = self.peek()
        if not first:
            raise DecodeError(f"Unexpected end of input at offset {self.offset}")
        if first not in "{[\"":
            # raw_decode accepts a valid prefix of a cut-off number ("1" of "1.5")
            self._buffer_scalar()
        while True:
            try:
                obj, end = self._decoder.raw_decode(self.buffer, self.pos)
            except json.JSONDecodeError as e:
                if self._fill():
                    continue
                raise DecodeError(
                    f"Malformed JSON at offset {self.consumed + e.pos}: {e.msg}"
                ) from e
            self.pos = end
            return obj

    def iter_array(self) -> Iterator[Any]:
        """Yield the elements of the array starting at the read position."""
        self.expect("[")
        if self.peek() == "]":
            self.pos += 1
            return
        while True:
            yield self.value()
            separator = self.peek()
            if separator == ",":
                self.pos += 1
            elif separator == "]":
                self.pos += 1
                return
            else:
                raise DecodeError(
                    f"Expected ',' or ']' at offset {self.offset}, "
                    f"found {_describe(separator)}"
                )

    def seek_key(self, key: str) -> None:
        """
        Position the reader at the value of ``key`` in the object that starts
        at the read position. Values of preceding keys are decoded and dropped.
        """
        self.expect("{")
        if self.peek() == "}":
            raise DecodeError(f"Top-level object has no {key!r} key")
        while True:
            name = self.value()
            if not isinstance(name, str):
                raise DecodeError(f"Expected an object key at offset {self.offset}")
            self.expect(":")
            if name == key:
                return
            logger.debug(f"Skipping top-level key {name!r}")
            self.value()
            separator = self.peek()
            if separator == ",":
                self.pos += 1
            elif separator == "}":
                raise DecodeError(f"Top-level object has no {key!r} key")
            else:
                raise DecodeError(
                    f"Expected ',' or '}}' at offset {self.offset}, "
                    f"found {_describe(separator)}"
                )


def iter_json_array(
    handle: TextIO,
    key: str = TakeoutConstants.RECORDS_KEY,
    chunk_size: int = TakeoutConstants.READ_CHUNK_SIZE,
) -> Iterator[Any]:
    """
    Stream the elements of a records array.

    The document may be a top-level array, or a top-level object holding the
    array under ``key`` (the Records.json layout).

    Args:
        handle: Text handle positioned at the start of the document
        key: Object key holding the array
        chunk_size: Characters read per refill

    Yields:
        Each decoded array element, in file order

    Raises:
        DecodeError: If the document is not one of the two shapes or is
            syntactically malformed
    """
    reader = JsonArrayReader(handle, chunk_size)
    first = reader.peek()
    if first == "{":
        reader.seek_key(key)
    elif first != "[":
        raise DecodeError(
            f"Expected a JSON array or an object with a {key!r} array, "
            f"found {_describe(first)}"
        )
    yield from reader.iter_array()
