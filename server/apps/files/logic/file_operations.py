"""Business logic for the file lifecycle.

A File moves through two phases: ``create_file`` inserts a
metadata-only row, ``upload_file`` stores the content and completes
the row. ``delete_file`` removes both again.

Ordering keeps the database and the blob store consistent:
- upload writes the blob first, then completes the row; if the row
  update fails the blob is rolled back
- delete removes the row first, then the blob; a failed blob delete
  is reported to the caller
"""

import logging
import threading
from typing import TYPE_CHECKING, BinaryIO

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from server.apps.files.exceptions import (
    FileAlreadyCompleteError,
    FileDoesNotExistError,
    FileNotCompleteError,
    FileSizeMismatchError,
)
from server.apps.files.infrastructure.metadata import (
    build_storage_key,
    detect_mime_type,
    is_seekable,
    spool,
)
from server.apps.files.models import File

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import BlobStorage

logger = logging.getLogger(__name__)


def get_file(file_id: int) -> File:
    """Get file by ID.

    Args:
        file_id: ID of the file.

    Returns:
        File instance.

    Raises:
        FileDoesNotExistError: If no file has this ID.
    """
    try:
        return File.objects.get(pk=file_id)
    except File.DoesNotExist as error:
        raise FileDoesNotExistError(file_id) from error


def list_files(version_id: int | None = None) -> QuerySet[File]:
    """List files, optionally only those attached to a version.

    Args:
        version_id: Restrict to files attached to this version.

    Returns:
        QuerySet of File objects, newest first.
    """
    files = File.objects.all()
    if version_id is not None:
        files = files.filter(version_links__version_id=version_id)
    return files


def create_file(name: str) -> File:
    """Create a metadata-only file placeholder.

    No storage interaction happens here; content arrives later via
    ``upload_file``.

    Args:
        name: Display name of the file.

    Returns:
        Created File instance with ``is_complete=False``.
    """
    file_instance = File.objects.create(name=name)
    logger.info(
        'File record created: %s (ID: %d)',
        name,
        file_instance.id,
    )
    return file_instance


def upload_file(
    storage: 'BlobStorage',
    file_id: int,
    file_obj: BinaryIO,
    declared_size: int | None = None,
    *,
    cancel: threading.Event | None = None,
) -> File:
    """Store content for a metadata-only file and mark it complete.

    Transaction safety: Upload to storage first, then complete the
    database record. If the record update fails, the uploaded blob
    is deleted from storage (rollback).

    The update only matches rows that are still incomplete, so of
    two concurrent uploads to the same file exactly one wins; the
    loser's blob is rolled back and it gets FileAlreadyCompleteError.

    Args:
        storage: Blob storage backend.
        file_id: ID of the file to complete.
        file_obj: Content stream; non-seekable streams are spooled.
        declared_size: Size announced by the client, if any.
        cancel: Optional cancellation event for the storage write.

    Returns:
        Completed File instance.

    Raises:
        FileDoesNotExistError: If the file does not exist.
        FileAlreadyCompleteError: If the file already has content.
        FileSizeMismatchError: If declared and received sizes differ.
        StorageError: If writing the blob fails.
    """
    file_instance = get_file(file_id)
    if file_instance.is_complete:
        raise FileAlreadyCompleteError(file_id)

    if is_seekable(file_obj):
        return _store_and_complete(
            storage,
            file_instance,
            file_obj,
            declared_size,
            cancel,
        )

    with spool(file_obj) as spooled:
        return _store_and_complete(
            storage,
            file_instance,
            spooled,
            declared_size,
            cancel,
        )


def download_file(
    storage: 'BlobStorage',
    file_id: int,
    *,
    cancel: threading.Event | None = None,
) -> tuple[File, BinaryIO]:
    """Open the stored content of a complete file.

    Args:
        storage: Blob storage backend.
        file_id: ID of the file.
        cancel: Optional cancellation event.

    Returns:
        Tuple of the File and a seekable stream; the caller closes it.

    Raises:
        FileDoesNotExistError: If the file does not exist.
        FileNotCompleteError: If no content was uploaded yet.
        BlobNotFoundError: If the blob vanished from storage.
    """
    file_instance = get_file(file_id)
    if not file_instance.has_content:
        raise FileNotCompleteError(file_id)

    logger.debug(
        'Opening file content: %s (ID: %d)',
        file_instance.storage_path,
        file_id,
    )
    stream = storage.retrieve(file_instance.storage_path, cancel=cancel)
    return file_instance, stream


def delete_file(
    storage: 'BlobStorage',
    file_id: int,
    *,
    cancel: threading.Event | None = None,
) -> None:
    """Delete file from database and storage.

    Transaction safety: Delete DB record first, then the blob. If the
    blob delete fails the error propagates; the record is already
    gone and the blob becomes an orphan for ``cleanup_storage``.

    Args:
        storage: Blob storage backend.
        file_id: ID of file to delete.
        cancel: Optional cancellation event for the blob delete.

    Raises:
        FileDoesNotExistError: If file doesn't exist.
        StorageError: If deleting the blob fails.
    """
    file_instance = get_file(file_id)
    storage_path = file_instance.storage_path if file_instance.has_content else None

    logger.info(
        'Deleting file: ID=%d, path=%s',
        file_id,
        storage_path,
    )

    try:
        with transaction.atomic():
            file_instance.delete()
            logger.info('File record deleted from database: ID=%d', file_id)
    except Exception:
        logger.exception('Failed to delete file from database: ID=%d', file_id)
        raise

    if storage_path is None:
        return

    try:
        storage.delete(storage_path, cancel=cancel)
    except Exception:
        logger.exception(
            'Failed to delete blob after DB delete: %s (ID: %d)',
            storage_path,
            file_id,
        )
        raise


def _store_and_complete(  # noqa: WPS211
    storage: 'BlobStorage',
    file_instance: File,
    file_obj: BinaryIO,
    declared_size: int | None,
    cancel: threading.Event | None,
) -> File:
    """Write the blob, then complete the record or roll the blob back.

    Args:
        storage: Blob storage backend.
        file_instance: Incomplete File to fill in.
        file_obj: Seekable content stream.
        declared_size: Size announced by the client, if any.
        cancel: Optional cancellation event.

    Returns:
        Completed File instance.
    """
    file_id = file_instance.id
    storage_path = build_storage_key()
    mime_type = detect_mime_type(file_obj)

    # Step 1: Upload to storage first
    try:
        logger.info('Uploading file content: %s (ID: %d)', storage_path, file_id)
        file_size = storage.save(storage_path, file_obj, cancel=cancel)
    except Exception:
        logger.exception('Failed to upload file to storage: %s', storage_path)
        raise

    if declared_size is not None and declared_size != file_size:
        storage.rollback_upload(storage_path)
        raise FileSizeMismatchError(declared_size, file_size)

    # Step 2: Complete the database record (in transaction)
    try:
        with transaction.atomic():
            updated = File.objects.filter(
                pk=file_id,
                is_complete=False,
            ).update(
                size=file_size,
                storage_path=storage_path,
                mime_type=mime_type,
                is_complete=True,
                updated_at=timezone.now(),
            )
    except Exception:
        # Rollback: Delete blob from storage since DB update failed
        logger.exception(
            'Database update failed, rolling back storage upload: %s',
            storage_path,
        )
        storage.rollback_upload(storage_path)
        raise

    if not updated:
        # Another request completed or deleted the file meanwhile
        storage.rollback_upload(storage_path)
        if File.objects.filter(pk=file_id).exists():
            raise FileAlreadyCompleteError(file_id)
        raise FileDoesNotExistError(file_id)

    file_instance.refresh_from_db()
    logger.info(
        'File completed: %s (ID: %d, %d bytes, %s)',
        storage_path,
        file_id,
        file_size,
        mime_type,
    )
    return file_instance
