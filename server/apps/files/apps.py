"""Django app configuration for files app."""

from functools import cached_property
from typing import TYPE_CHECKING

from django.apps import AppConfig
from django.conf import settings

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import BlobStorage


class FilesConfig(AppConfig):
    """Configuration for files app.

    Owns the process-wide blob storage backend. It is built from the
    ``BLOB_STORAGE`` setting on first access and then reused by every
    request thread; backends keep no per-request state.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.files'
    verbose_name = 'Files'

    @cached_property
    def storage(self) -> 'BlobStorage':
        """Blob storage backend selected by settings."""
        from server.apps.files.infrastructure.factory import (  # noqa: WPS433
            StorageConfig,
            build_storage,
        )

        return build_storage(StorageConfig.from_settings(settings.BLOB_STORAGE))
