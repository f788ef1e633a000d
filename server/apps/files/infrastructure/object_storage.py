"""S3-compatible blob storage (MinIO, Cloudflare R2, AWS S3)."""

import logging
import threading
from typing import Any, BinaryIO, Final, final, override

from botocore.exceptions import BotoCoreError, ClientError
from storages.backends.s3 import S3Storage

from server.apps.files.exceptions import BlobNotFoundError, StorageError
from server.apps.files.infrastructure.storage import (
    BlobStorage,
    ObjectInfo,
    VisitFunc,
    check_cancelled,
    normalize_key,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES: Final = frozenset(('404', 'NoSuchKey', 'NotFound'))
_DELIMITER: Final = '/'

_BOTO_ERRORS: Final = (BotoCoreError, ClientError)


def _is_not_found(error: ClientError) -> bool:
    code = error.response.get('Error', {}).get('Code', '')
    return code in _NOT_FOUND_CODES


def _object_info(summary: Any) -> ObjectInfo:
    return ObjectInfo(
        path=summary.key,
        size=summary.size,
        modified_at=summary.last_modified,
    )


@final
class _CountingReader:
    """Read-only stream wrapper counting bytes handed to boto3."""

    def __init__(
        self,
        content: BinaryIO,
        key: str,
        cancel: threading.Event | None,
    ) -> None:
        self._content = content
        self._key = key
        self._cancel = cancel
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        check_cancelled(self._cancel, 'save', self._key)
        chunk = self._content.read(size)
        self.bytes_read += len(chunk)
        return chunk


@final
class ObjectStorage(BlobStorage):
    """Blob storage in an S3-compatible bucket.

    Connection handling comes from django-storages ``S3Storage``;
    blob operations go through its boto3 bucket resource. S3 only
    exposes an object once its upload completes, so ``save`` is
    atomic per key without any temp object.
    """

    def __init__(  # noqa: WPS211
        self,
        *,
        bucket_name: str,
        access_key: str | None = None,
        secret_key: str | None = None,
        endpoint_url: str | None = None,
        region_name: str | None = None,
    ) -> None:
        """Initialize storage for one bucket.

        Args:
            bucket_name: Bucket holding every blob.
            access_key: Access key ID, or None for the default chain.
            secret_key: Secret access key.
            endpoint_url: Custom endpoint for MinIO/R2.
            region_name: Bucket region.
        """
        self._backend = S3Storage(
            bucket_name=bucket_name,
            access_key=access_key,
            secret_key=secret_key,
            endpoint_url=endpoint_url,
            region_name=region_name,
            file_overwrite=True,  # Keys are chosen by the caller
            default_acl=None,  # Inherit bucket ACL
        )

    @property
    def bucket_name(self) -> str:
        """Name of the backing bucket."""
        return self._backend.bucket_name

    @override
    def save(
        self,
        key: str,
        content: BinaryIO,
        *,
        cancel: threading.Event | None = None,
    ) -> int:
        name = normalize_key(key, operation='save')
        check_cancelled(cancel, 'save', key)
        reader = _CountingReader(content, key, cancel)

        try:
            logger.info('Uploading blob to bucket: %s', name)
            self._backend.bucket.Object(name).upload_fileobj(reader)
        except _BOTO_ERRORS as error:
            logger.exception('Failed to upload blob: %s', name)
            raise StorageError('save', key, str(error)) from error

        logger.info('Uploaded blob: %s (%d bytes)', name, reader.bytes_read)
        return reader.bytes_read

    @override
    def retrieve(
        self,
        key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> BinaryIO:
        """Open the object under ``key``.

        Existence is checked with a HEAD request first, because
        ``S3File`` only fails on its first read; this costs one extra
        round trip per call.

        Returns:
            django-storages ``S3File``; it spools the object locally on
            first read, so it supports ``seek``.
        """
        name = normalize_key(key, operation='retrieve')
        check_cancelled(cancel, 'retrieve', key)
        self._ensure_exists(name, 'retrieve', key)
        try:
            return self._backend.open(name, 'rb')
        except _BOTO_ERRORS as error:
            logger.exception('Failed to open blob: %s', name)
            raise StorageError('retrieve', key, str(error)) from error

    @override
    def delete(
        self,
        key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Remove the object under ``key``.

        S3 deletes of absent keys succeed silently, so existence is
        checked with a separate HEAD request first. The check and the
        delete are not atomic: an object removed concurrently between
        them is reported as deleted rather than as not found.

        Raises:
            BlobNotFoundError: If no object exists under ``key``.
            StorageError: If the lookup or the delete fails.
        """
        name = normalize_key(key, operation='delete')
        check_cancelled(cancel, 'delete', key)
        self._ensure_exists(name, 'delete', key)
        try:
            logger.info('Deleting blob from bucket: %s', name)
            self._backend.delete(name)
        except _BOTO_ERRORS as error:
            logger.exception('Failed to delete blob: %s', name)
            raise StorageError('delete', key, str(error)) from error
        logger.info('Deleted blob: %s', name)

    @override
    def list(
        self,
        root_key: str,
        *,
        cancel: threading.Event | None = None,
    ) -> frozenset[ObjectInfo]:
        prefix = self._prefix(root_key, 'list')
        check_cancelled(cancel, 'list', root_key)
        summaries = self._backend.bucket.objects.filter(
            Prefix=prefix,
            Delimiter=_DELIMITER,
        )
        try:
            return frozenset(
                _object_info(summary)
                for summary in summaries
                if not summary.key.endswith(_DELIMITER)
            )
        except _BOTO_ERRORS as error:
            logger.exception('Failed to list prefix: %s', prefix)
            raise StorageError('list', root_key, str(error)) from error

    @override
    def walk(
        self,
        root_key: str,
        visit: VisitFunc,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        prefix = self._prefix(root_key, 'walk')
        pages = self._backend.bucket.objects.filter(Prefix=prefix).pages()
        while True:
            check_cancelled(cancel, 'walk', root_key)
            try:
                page = next(pages, None)
            except _BOTO_ERRORS as error:
                logger.exception('Failed to walk prefix: %s', prefix)
                raise StorageError('walk', root_key, str(error)) from error
            if page is None:
                return
            for summary in page:
                if summary.key.endswith(_DELIMITER):
                    continue
                check_cancelled(cancel, 'walk', root_key)
                visit(_object_info(summary))

    def _prefix(self, root_key: str, operation: str) -> str:
        normalized = normalize_key(
            root_key,
            operation=operation,
            allow_root=True,
        )
        if not normalized:
            return ''
        return f'{normalized}{_DELIMITER}'

    def _ensure_exists(self, name: str, operation: str, key: str) -> None:
        try:
            self._backend.bucket.Object(name).load()
        except ClientError as error:
            if _is_not_found(error):
                raise BlobNotFoundError(operation, key) from error
            logger.exception('Failed to look up blob: %s', name)
            raise StorageError(operation, key, str(error)) from error
        except BotoCoreError as error:
            logger.exception('Failed to look up blob: %s', name)
            raise StorageError(operation, key, str(error)) from error
