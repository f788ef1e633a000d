"""Local filesystem blob storage."""

import logging
import os
import tempfile
import threading
import time
from datetime import UTC, datetime, timedelta
from operator import attrgetter
from pathlib import Path
from typing import BinaryIO, Final, final, override

from django.core.exceptions import ImproperlyConfigured

from server.apps.files.exceptions import (
    BlobNotFoundError,
    StorageError,
    StoragePathError,
)
from server.apps.files.infrastructure.storage import (
    BlobStorage,
    ObjectInfo,
    VisitFunc,
    check_cancelled,
    normalize_key,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE: Final = 64 * 1024  # 64KB chunks for streaming writes
_DIR_MODE: Final = 0o700
_INCOMING_DIR: Final = '.incoming'  # Reserved, never addressable by a key
_TEMP_SUFFIX: Final = '.tmp'


@final
class FilesystemStorage(BlobStorage):
    """Blob storage confined to one directory on local disk.

    Every key is resolved against the root directory and rejected if
    its parent directory (symlinks included) lands outside it. A
    symlink in the final key segment is never followed: it is not a
    blob, ``save`` replaces the link itself and ``delete`` removes
    the link, never its target.

    Saves go to a temporary file in the reserved ``.incoming``
    directory under the root and are moved into place with
    ``os.replace``, which is atomic within one filesystem. A reader
    therefore never observes a half-written blob. Keys cannot name
    anything inside ``.incoming``, so an interrupted save can leave
    a leftover only there, where ``list`` and ``walk`` never look and
    ``purge_stale_uploads`` removes it.
    """

    def __init__(self, root_path: str | os.PathLike[str]) -> None:
        """Initialize storage, creating the root directory if needed.

        Args:
            root_path: Directory holding every blob.

        Raises:
            ImproperlyConfigured: If the root cannot be created or is
                not a directory.
        """
        root = Path(root_path)
        try:
            root.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
            root.joinpath(_INCOMING_DIR).mkdir(mode=_DIR_MODE, exist_ok=True)
        except OSError as error:
            raise ImproperlyConfigured(
                f'Cannot create storage root {root}: {error}',
            ) from error

        self._root = root.resolve()
        self._incoming = self._root.joinpath(_INCOMING_DIR)
        if not self._incoming.is_dir():
            raise ImproperlyConfigured(
                f'Storage root is not a directory: {self._root}',
            )

    @property
    def root(self) -> Path:
        """Absolute path of the storage root."""
        return self._root

    @property
    def incoming(self) -> Path:
        """Directory holding in-progress saves."""
        return self._incoming

    @override
    def save(
        self,
        key: str,
        content: BinaryIO,
        *,
        cancel: threading.Event | None = None,
    ) -> int:
        """Write ``content`` to a temp file, then rename it over ``key``.

        On any failure, including cancellation, the temp file is
        removed and whatever was stored under ``key`` stays untouched.

        Args:
            key: Destination key.
            content: Readable binary stream.
            cancel: Optional cancellation event.

        Returns:
            Number of bytes written.

        Raises:
            StoragePathError: If the key is invalid.
            StorageCancelledError: If cancelled before the rename.
            StorageError: If writing or renaming fails.
        """
        target = self._resolve_blob(key, 'save')
        check_cancelled(cancel, 'save', key)
        logger.info('Saving blob to storage: %s', key)

        try:
            target.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        except OSError as error:
            logger.exception('Failed to create directories for: %s', key)
            raise StorageError('save', key, str(error)) from error

        written = 0
        temp_path: Path | None = None
        committed = False
        try:
            with tempfile.NamedTemporaryFile(
                dir=self._incoming,
                prefix=f'{target.name}.',
                suffix=_TEMP_SUFFIX,
                delete=False,
            ) as temp_file:
                temp_path = Path(temp_file.name)
                for chunk in iter(lambda: content.read(_CHUNK_SIZE), b''):
                    check_cancelled(cancel, 'save', key)
                    temp_file.write(chunk)
                    written += len(chunk)
                temp_file.flush()
                os.fsync(temp_file.fileno())

            check_cancelled(cancel, 'save', key)
            os.replace(temp_path, target)
            committed = True
        except OSError as error:
            logger.exception('Failed to save blob: %s', key)
            raise StorageError('save', key, str(error)) from error
        finally:
            if not committed:
                self._discard_temp_file(temp_path)

        logger.info('Saved blob: %s (%d bytes)', key, written)
        return written

    @override
    def retrieve(
        self,
        key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> BinaryIO:
        """Open the blob under ``key`` for reading.

        Returns:
            Buffered reader supporting ``seek``; the caller closes it.
        """
        path = self._resolve_blob(key, 'retrieve')
        check_cancelled(cancel, 'retrieve', key)
        if path.is_symlink():
            raise BlobNotFoundError('retrieve', key)
        try:
            return path.open('rb')
        except (
            FileNotFoundError,
            IsADirectoryError,
            NotADirectoryError,
        ) as error:
            raise BlobNotFoundError('retrieve', key) from error
        except OSError as error:
            logger.exception('Failed to open blob: %s', key)
            raise StorageError('retrieve', key, str(error)) from error

    @override
    def delete(
        self,
        key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        path = self._resolve_blob(key, 'delete')
        check_cancelled(cancel, 'delete', key)
        if path.is_dir() and not path.is_symlink():
            raise BlobNotFoundError('delete', key)

        logger.info('Deleting blob from storage: %s', key)
        try:
            path.unlink()
        except (FileNotFoundError, NotADirectoryError) as error:
            raise BlobNotFoundError('delete', key) from error
        except OSError as error:
            logger.exception('Failed to delete blob: %s', key)
            raise StorageError('delete', key, str(error)) from error
        logger.info('Deleted blob: %s', key)

    @override
    def list(
        self,
        root_key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> frozenset[ObjectInfo]:
        """List regular files directly inside ``root_key``.

        A missing directory lists as empty, like an unused prefix in
        object storage.
        """
        directory = self._resolve_directory(root_key, 'list')
        check_cancelled(cancel, 'list', root_key)
        try:
            with os.scandir(directory) as entries:
                return frozenset(
                    self._object_info(entry, 'list')
                    for entry in entries
                    if entry.is_file(follow_symlinks=False)
                )
        except (FileNotFoundError, NotADirectoryError):
            return frozenset()
        except OSError as error:
            logger.exception('Failed to list directory: %s', root_key)
            raise StorageError('list', root_key, str(error)) from error

    @override
    def walk(
        self,
        root_key: str,
        visit: VisitFunc,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Visit every regular file below ``root_key`` in name order.

        Symlinks are neither followed nor reported.
        """
        directory = self._resolve_directory(root_key, 'walk')
        self._walk_directory(directory, visit, cancel, root_key)

    @override
    def purge_stale_uploads(
        self,
        older_than: timedelta,
        *,
        dry_run: bool = False,
    ) -> tuple[str, ...]:
        """Remove temp files left behind by saves that never finished.

        Args:
            older_than: Minimum age; younger temp files may belong to
                saves still in progress.
            dry_run: Report leftovers without removing them.

        Returns:
            Root-relative paths of the removed temp files.
        """
        cutoff = time.time() - older_than.total_seconds()
        purged: list[str] = []
        with os.scandir(self._incoming) as entries:
            leftovers = [
                entry for entry in entries
                if entry.is_file(follow_symlinks=False)
            ]

        for entry in leftovers:
            try:
                if entry.stat(follow_symlinks=False).st_mtime > cutoff:
                    continue
                if not dry_run:
                    os.unlink(entry.path)
            except FileNotFoundError:
                # Renamed into place or removed by its own save meanwhile
                continue
            except OSError:
                logger.exception('Failed to purge temp file: %s', entry.path)
                continue
            purged.append(f'{_INCOMING_DIR}/{entry.name}')

        if purged and not dry_run:
            logger.info('Purged %d stale temp files', len(purged))
        return tuple(purged)

    def _resolve_blob(self, key: str, operation: str) -> Path:
        """Resolve the parent directory of ``key`` and join its name.

        The final segment is left unresolved so a symlink there is
        handled as a link, not as its target.
        """
        normalized = self._normalize(key, operation, allow_root=False)
        parent, _, name = normalized.rpartition('/')
        directory = self._root.joinpath(parent).resolve()
        if not directory.is_relative_to(self._root):
            # A symlink inside the root points outside of it
            raise StoragePathError(operation, key, 'key escapes storage root')
        return directory.joinpath(name)

    def _resolve_directory(self, root_key: str, operation: str) -> Path:
        normalized = self._normalize(root_key, operation, allow_root=True)
        directory = self._root.joinpath(normalized).resolve()
        if not directory.is_relative_to(self._root):
            raise StoragePathError(
                operation,
                root_key,
                'key escapes storage root',
            )
        return directory

    def _normalize(self, key: str, operation: str, *, allow_root: bool) -> str:
        normalized = normalize_key(
            key,
            operation=operation,
            allow_root=allow_root,
        )
        if normalized.split('/', 1)[0] == _INCOMING_DIR:
            raise StoragePathError(operation, key, 'key names a reserved path')
        return normalized

    def _walk_directory(
        self,
        directory: str | Path,
        visit: VisitFunc,
        cancel: threading.Event | None,
        root_key: str,
    ) -> None:
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=attrgetter('name'))
        except (FileNotFoundError, NotADirectoryError):
            return
        except OSError as error:
            logger.exception('Failed to walk directory: %s', directory)
            raise StorageError('walk', root_key, str(error)) from error

        for entry in entries:
            check_cancelled(cancel, 'walk', root_key)
            if entry.is_dir(follow_symlinks=False):
                if Path(entry.path) != self._incoming:
                    self._walk_directory(entry.path, visit, cancel, root_key)
            elif entry.is_file(follow_symlinks=False):
                visit(self._object_info(entry, 'walk'))

    def _object_info(self, entry: os.DirEntry[str], operation: str) -> ObjectInfo:
        key = Path(entry.path).relative_to(self._root).as_posix()
        try:
            stat_result = entry.stat(follow_symlinks=False)
        except OSError as error:
            raise StorageError(operation, key, str(error)) from error
        return ObjectInfo(
            path=key,
            size=stat_result.st_size,
            modified_at=datetime.fromtimestamp(stat_result.st_mtime, tz=UTC),
        )

    def _discard_temp_file(self, temp_path: Path | None) -> None:
        if temp_path is None:
            return
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            # The save error is the one worth reporting
            logger.exception('Failed to remove temp file: %s', temp_path)
