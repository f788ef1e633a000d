"""Single-range ``Range: bytes=...`` support for content downloads.

Only one range per request is served. A header naming several ranges,
or one that does not parse, is ignored and the whole body is sent,
which HTTP allows for any ``Range`` request.
"""

import re
from dataclasses import dataclass
from typing import BinaryIO, Final, final

_RANGE_PATTERN: Final = re.compile(r'^bytes=(\d*)-(\d*)$')
_CHUNK_SIZE: Final = 64 * 1024


class RangeNotSatisfiableError(Exception):
    """Raised when a well-formed range lies outside the content."""

    def __init__(self, size: int) -> None:
        """Initialize RangeNotSatisfiableError.

        Args:
            size: Full content size, reported in ``Content-Range``.
        """
        self.size = size
        super().__init__(f'Range not satisfiable for {size} bytes')


@final
@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range within content of ``size`` bytes."""

    start: int
    end: int
    size: int

    @property
    def length(self) -> int:
        """Number of bytes in the range."""
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        """Value for the ``Content-Range`` response header."""
        return f'bytes {self.start}-{self.end}/{self.size}'


def parse_range(header: str | None, size: int) -> ByteRange | None:
    """Parse a ``Range`` header against content of ``size`` bytes.

    Supports ``bytes=a-b``, ``bytes=a-`` and the suffix form
    ``bytes=-n``; an end past the content is clamped to its last byte.

    Args:
        header: Raw header value, or None when absent.
        size: Content size in bytes.

    Returns:
        The requested range, or None to serve the whole body.

    Raises:
        RangeNotSatisfiableError: If the range selects no bytes.
    """
    if not header:
        return None
    match = _RANGE_PATTERN.match(header.strip())
    if match is None:
        return None

    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        suffix = int(last)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiableError(size)
        return ByteRange(start=max(size - suffix, 0), end=size - 1, size=size)

    start = int(first)
    end = int(last) if last else size - 1
    if end < start:
        # Syntactically invalid, so the header is ignored
        return None
    if start >= size:
        raise RangeNotSatisfiableError(size)
    return ByteRange(start=start, end=min(end, size - 1), size=size)


@final
class RangeStream:
    """Iterate over one byte range of a seekable stream.

    Closing the iterator closes the underlying stream, so it can be
    handed to ``StreamingHttpResponse`` directly.
    """

    def __init__(self, stream: BinaryIO, byte_range: ByteRange) -> None:
        self._stream = stream
        self._range = byte_range

    def __iter__(self):
        self._stream.seek(self._range.start)
        remaining = self._range.length
        while remaining > 0:
            chunk = self._stream.read(min(_CHUNK_SIZE, remaining))
            if not chunk:
                return
            remaining -= len(chunk)
            yield chunk

    def close(self) -> None:
        """Close the underlying stream."""
        self._stream.close()
