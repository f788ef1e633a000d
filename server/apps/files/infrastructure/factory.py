"""Selection of the blob storage backend from configuration."""

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final, final

from django.apps import apps
from django.core.exceptions import ImproperlyConfigured

from server.apps.files.infrastructure.filesystem import FilesystemStorage
from server.apps.files.infrastructure.object_storage import ObjectStorage
from server.apps.files.infrastructure.storage import BlobStorage


class StorageProvider(enum.StrEnum):
    """Supported blob storage backends."""

    FILESYSTEM = 'filesystem'
    S3 = 's3'


@final
@dataclass(frozen=True)
class StorageConfig:
    """Immutable storage settings, built once at startup."""

    provider: StorageProvider
    path: str = ''
    bucket_name: str = ''
    access_key: str | None = None
    secret_key: str | None = None
    endpoint_url: str | None = None
    region_name: str | None = None

    @classmethod
    def from_settings(cls, options: Mapping[str, Any]) -> 'StorageConfig':
        """Build config from the ``BLOB_STORAGE`` settings dict.

        Empty strings (typical for unset ``.env`` entries) become None.

        Args:
            options: Mapping with upper-case keys (PROVIDER, PATH, ...).

        Returns:
            Validated StorageConfig.

        Raises:
            ImproperlyConfigured: If the provider is unknown.
        """
        raw_provider = options.get('PROVIDER', StorageProvider.FILESYSTEM)
        try:
            provider = StorageProvider(raw_provider)
        except ValueError as error:
            raise ImproperlyConfigured(
                f'Unsupported storage provider: {raw_provider!r}',
            ) from error

        return cls(
            provider=provider,
            path=str(options.get('PATH') or ''),
            bucket_name=str(options.get('BUCKET_NAME') or ''),
            access_key=options.get('ACCESS_KEY') or None,
            secret_key=options.get('SECRET_KEY') or None,
            endpoint_url=options.get('ENDPOINT_URL') or None,
            region_name=options.get('REGION_NAME') or None,
        )


def _build_filesystem_storage(config: StorageConfig) -> BlobStorage:
    if not config.path:
        raise ImproperlyConfigured('Filesystem storage requires PATH')
    return FilesystemStorage(config.path)


def _build_object_storage(config: StorageConfig) -> BlobStorage:
    if not config.bucket_name:
        raise ImproperlyConfigured('S3 storage requires BUCKET_NAME')
    return ObjectStorage(
        bucket_name=config.bucket_name,
        access_key=config.access_key,
        secret_key=config.secret_key,
        endpoint_url=config.endpoint_url,
        region_name=config.region_name,
    )


_BUILDERS: Final[dict[StorageProvider, Callable[[StorageConfig], BlobStorage]]] = {
    StorageProvider.FILESYSTEM: _build_filesystem_storage,
    StorageProvider.S3: _build_object_storage,
}


def build_storage(config: StorageConfig) -> BlobStorage:
    """Create the backend selected by ``config.provider``.

    Args:
        config: Storage settings.

    Returns:
        Ready-to-use BlobStorage.

    Raises:
        ImproperlyConfigured: If required settings are missing.
    """
    return _BUILDERS[config.provider](config)


def get_storage() -> BlobStorage:
    """Get the process-wide backend owned by the files app.

    Returns:
        BlobStorage built from settings on first access.
    """
    return apps.get_app_config('files').storage  # type: ignore[attr-defined]
