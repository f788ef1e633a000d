"""Blob storage contract shared by every backend.

A backend stores raw bytes under backend-relative keys such as
``files/<uuid>``. It keeps no metadata of its own beyond size and
modification time; what a key means is decided by the caller.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import BinaryIO, Final, final

from server.apps.files.exceptions import (
    StorageCancelledError,
    StoragePathError,
)

logger = logging.getLogger(__name__)

_KEY_SEPARATOR: Final = '/'
_FORBIDDEN_KEY_CHARACTERS: Final = frozenset(('\x00', '\\'))


@final
@dataclass(frozen=True)
class ObjectInfo:
    """Size and location of one stored blob.

    ``path`` is always relative to the storage root and uses ``/``
    separators, so it can be passed straight back to ``retrieve``.
    """

    path: str
    size: int
    modified_at: datetime | None = None


VisitFunc = Callable[[ObjectInfo], None]


def normalize_key(
    key: str,
    *,
    operation: str,
    allow_root: bool = False,
) -> str:
    """Validate a storage key and return its canonical form.

    Empty and ``.`` segments are dropped. Absolute keys, ``..``
    segments, backslashes and NUL bytes are rejected outright, so a
    valid key can never address anything outside the storage root.

    Args:
        key: Key supplied by the caller.
        operation: Operation name used in error messages.
        allow_root: Accept a key naming the root itself ('' or '.').

    Returns:
        Canonical key ('' for the root).

    Raises:
        StoragePathError: If the key is malformed or escapes the root.
    """
    if any(char in key for char in _FORBIDDEN_KEY_CHARACTERS):
        raise StoragePathError(operation, key, 'forbidden character in key')
    if key.startswith(_KEY_SEPARATOR):
        raise StoragePathError(operation, key, 'key must be relative')

    parts = [
        part for part in key.split(_KEY_SEPARATOR)
        if part not in {'', '.'}
    ]
    if '..' in parts:
        raise StoragePathError(operation, key, 'key escapes storage root')
    if not parts and not allow_root:
        raise StoragePathError(operation, key, 'key must name a blob')

    return _KEY_SEPARATOR.join(parts)


def check_cancelled(
    cancel: threading.Event | None,
    operation: str,
    key: str,
) -> None:
    """Raise if the caller has cancelled the operation.

    Args:
        cancel: Event set by the caller to abandon the operation.
        operation: Operation name used in the error.
        key: Key the operation targets.

    Raises:
        StorageCancelledError: If ``cancel`` is set.
    """
    if cancel is not None and cancel.is_set():
        raise StorageCancelledError(operation, key)


class BlobStorage(ABC):
    """Byte storage addressed by backend-relative keys.

    Every operation accepts an optional ``cancel`` event; once it is
    set the operation stops at its next check and raises
    ``StorageCancelledError``. Failures are always raised, never
    swallowed, except in ``rollback_upload`` which is best-effort.
    """

    @abstractmethod
    def save(
        self,
        key: str,
        content: BinaryIO,
        *,
        cancel: threading.Event | None = None,
    ) -> int:
        """Store all bytes of ``content`` under ``key``.

        Existing content is replaced atomically: readers see either
        the old blob or the new one, never a partial write.

        Args:
            key: Destination key.
            content: Readable binary stream.
            cancel: Optional cancellation event.

        Returns:
            Number of bytes written.
        """

    @abstractmethod
    def retrieve(
        self,
        key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> BinaryIO:
        """Open the blob stored under ``key`` for reading.

        Args:
            key: Key to open.
            cancel: Optional cancellation event.

        Returns:
            Seekable binary stream; the caller must close it.

        Raises:
            BlobNotFoundError: If no blob exists under ``key``.
        """

    @abstractmethod
    def delete(
        self,
        key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Remove the blob stored under ``key``.

        Args:
            key: Key to delete.
            cancel: Optional cancellation event.

        Raises:
            BlobNotFoundError: If no blob exists under ``key``.
        """

    @abstractmethod
    def list(
        self,
        root_key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> frozenset[ObjectInfo]:
        """List blobs directly under ``root_key`` (not recursive).

        Args:
            root_key: Directory-like key prefix; '' for the root.
            cancel: Optional cancellation event.

        Returns:
            Blobs one level below ``root_key``; sub-directories excluded.
        """

    @abstractmethod
    def walk(
        self,
        root_key: str,
        visit: VisitFunc,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Call ``visit`` for every blob below ``root_key``, recursively.

        An exception raised by ``visit`` stops the walk and propagates
        unchanged to the caller.

        Args:
            root_key: Directory-like key prefix; '' for the root.
            visit: Callback receiving each blob's ObjectInfo.
            cancel: Optional cancellation event.
        """

    def rollback_upload(self, key: str) -> None:
        """Delete a just-saved blob whose database update failed.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised, because the caller is already
        propagating the failure that triggered the rollback.

        Args:
            key: Key of the blob to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting blob: %s', key)
            self.delete(key)
            logger.info('Successfully rolled back upload: %s', key)
        except Exception:
            # The blob stays in storage without a referencing row;
            # cleanup_storage removes it later
            logger.exception('Failed to rollback upload, orphaned blob: %s', key)

    def purge_stale_uploads(
        self,
        older_than: timedelta,
        *,
        dry_run: bool = False,
    ) -> tuple[str, ...]:
        """Remove leftovers of interrupted saves older than ``older_than``.

        Backends whose saves cannot leave leftovers keep this default.

        Args:
            older_than: Minimum age of a leftover to be removed.
            dry_run: Report leftovers without removing them.

        Returns:
            Root-relative paths of the (would-be) removed leftovers.
        """
        return ()
