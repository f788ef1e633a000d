"""Metadata extraction utilities for files."""

import shutil
import tempfile
import uuid
from typing import BinaryIO, Final

import magic

_SNIFF_SIZE: Final = 3072  # Leading bytes inspected for MIME detection
_SPOOL_MAX_SIZE: Final = 2 * 1024 * 1024  # Spill to disk above 2MB
_STORAGE_KEY_PREFIX: Final = 'files'
_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def build_storage_key() -> str:
    """Generate a fresh storage key for uploaded content.

    The key never derives from the user-supplied filename, so two
    uploads cannot collide and a name cannot inject path segments.

    Returns:
        Key of the form 'files/<uuid4>'.
    """
    return f'{_STORAGE_KEY_PREFIX}/{uuid.uuid4()}'


def detect_mime_type(file_obj: BinaryIO) -> str:
    """Detect MIME type by sniffing the leading bytes of the content.

    Uses python-magic (libmagic) on the first few kilobytes, then
    rewinds the stream to its start so the sniffed bytes are still
    part of whatever is stored afterwards.

    Args:
        file_obj: Seekable binary stream positioned anywhere.

    Returns:
        MIME type string (e.g., 'application/pdf', 'text/plain').
        Returns 'application/octet-stream' if libmagic has no answer.
    """
    file_obj.seek(0)
    head = file_obj.read(_SNIFF_SIZE)
    file_obj.seek(0)

    mime_type = magic.from_buffer(head, mime=True)
    return mime_type or _DEFAULT_MIME_TYPE


def is_seekable(file_obj: BinaryIO) -> bool:
    """Check whether a stream supports rewinding.

    Args:
        file_obj: File-like object.

    Returns:
        True if ``seek`` can be used on the stream.
    """
    seekable = getattr(file_obj, 'seekable', None)
    if seekable is None:
        return hasattr(file_obj, 'seek')
    return bool(seekable())


def spool(file_obj: BinaryIO) -> BinaryIO:
    """Copy a non-seekable stream into a seekable temporary file.

    Small content stays in memory; larger content spills to disk.
    The caller owns (and must close) the returned spool.

    Args:
        file_obj: Readable binary stream.

    Returns:
        SpooledTemporaryFile positioned at its start.
    """
    spooled = tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX_SIZE)
    shutil.copyfileobj(file_obj, spooled)
    spooled.seek(0)
    return spooled  # type: ignore[return-value]
