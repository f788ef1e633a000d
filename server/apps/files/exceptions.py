"""Exceptions for files app.

The three base classes classify every domain failure for the HTTP
boundary: ``NotFoundError`` (absent), ``ConflictError`` (state clash)
and ``PreconditionFailedError`` (exists but not usable as requested).
"""


class NotFoundError(Exception):
    """Base for errors reporting that a resource does not exist."""


class ConflictError(Exception):
    """Base for errors reporting a clash with the current state."""


class PreconditionFailedError(Exception):
    """Base for errors reporting an unmet precondition."""


class FileDoesNotExistError(NotFoundError):
    """Raised when no File record has the requested ID."""

    def __init__(self, file_id: int) -> None:
        """Initialize FileDoesNotExistError.

        Args:
            file_id: ID that did not resolve.
        """
        self.file_id = file_id
        super().__init__(f'File not found: ID={file_id}')


class FileAlreadyCompleteError(ConflictError):
    """Raised when uploading content to a file that already has it."""

    def __init__(self, file_id: int) -> None:
        """Initialize FileAlreadyCompleteError.

        Args:
            file_id: ID of the complete file.
        """
        self.file_id = file_id
        super().__init__(f'File already complete: ID={file_id}')


class FileNotCompleteError(PreconditionFailedError):
    """Raised when reading content of a file that has none yet."""

    def __init__(self, file_id: int) -> None:
        """Initialize FileNotCompleteError.

        Args:
            file_id: ID of the metadata-only file.
        """
        self.file_id = file_id
        super().__init__(f'File not complete: ID={file_id}')


class FileSizeMismatchError(PreconditionFailedError):
    """Raised when the uploaded byte count differs from the declared one."""

    def __init__(self, declared_size: int, actual_size: int) -> None:
        """Initialize FileSizeMismatchError.

        Args:
            declared_size: Size announced by the client.
            actual_size: Bytes actually received.
        """
        self.declared_size = declared_size
        self.actual_size = actual_size
        super().__init__(
            f'Declared size {declared_size} does not match '
            f'received size {actual_size}',
        )


class StorageError(Exception):
    """Raised when a blob storage operation fails.

    Carries the failing operation and key so logs and callers can
    tell which blob was involved.
    """

    def __init__(self, operation: str, key: str, reason: str) -> None:
        """Initialize StorageError.

        Args:
            operation: Storage operation name (save, retrieve, ...).
            key: Backend-relative key the operation targeted.
            reason: Human readable description of the failure.
        """
        self.operation = operation
        self.key = key
        self.reason = reason
        super().__init__(f'{operation} {key!r}: {reason}')


class BlobNotFoundError(StorageError, NotFoundError):
    """Raised when no blob exists under the requested key."""

    def __init__(self, operation: str, key: str) -> None:
        """Initialize BlobNotFoundError.

        Args:
            operation: Storage operation name.
            key: Missing key.
        """
        super().__init__(operation, key, 'blob not found')


class StoragePathError(StorageError, PreconditionFailedError):
    """Raised when a key is malformed or escapes the storage root."""


class StorageCancelledError(StorageError):
    """Raised when the caller cancelled an in-flight storage operation."""

    def __init__(self, operation: str, key: str) -> None:
        """Initialize StorageCancelledError.

        Args:
            operation: Storage operation name.
            key: Key the cancelled operation targeted.
        """
        super().__init__(operation, key, 'operation cancelled')
