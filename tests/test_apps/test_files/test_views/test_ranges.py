"""Tests for Range header parsing."""

import io

import pytest

from server.apps.files.ranges import (
    ByteRange,
    RangeNotSatisfiableError,
    RangeStream,
    parse_range,
)


@pytest.mark.parametrize(('header', 'expected'), [
    ('bytes=0-4', ByteRange(start=0, end=4, size=13)),
    ('bytes=7-', ByteRange(start=7, end=12, size=13)),
    ('bytes=-6', ByteRange(start=7, end=12, size=13)),
    ('bytes=-100', ByteRange(start=0, end=12, size=13)),
    ('bytes=12-12', ByteRange(start=12, end=12, size=13)),
])
def test_parse_range(header, expected):
    """Test supported forms of a single range."""
    assert parse_range(header, 13) == expected


@pytest.mark.parametrize('header', [
    None,
    '',
    'bytes=-',
    'bytes=5-2',
    'items=0-4',
    'bytes=0-1,4-5',
])
def test_parse_range_ignored(header):
    """Test absent or unusable headers select the whole body."""
    assert parse_range(header, 13) is None


@pytest.mark.parametrize(('header', 'size'), [
    ('bytes=13-', 13),
    ('bytes=-0', 13),
    ('bytes=0-', 0),
])
def test_parse_range_not_satisfiable(header, size):
    """Test ranges selecting no bytes are rejected."""
    with pytest.raises(RangeNotSatisfiableError):
        parse_range(header, size)


def test_range_stream():
    """Test only the selected bytes are yielded and close propagates."""
    stream = io.BytesIO(b'Hello, World!')
    range_stream = RangeStream(stream, ByteRange(start=7, end=11, size=13))

    assert b''.join(range_stream) == b'World'
    range_stream.close()
    assert stream.closed
