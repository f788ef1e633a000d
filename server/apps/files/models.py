"""Database models for files app."""

from typing import Final, final, override

from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_STORAGE_PATH_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255


@final
class File(models.Model):
    """Uploaded artifact: metadata row plus an optional stored blob.

    A File starts as a metadata-only placeholder (``is_complete`` is
    False and every content field is NULL). A successful upload sets
    ``size``, ``storage_path`` and ``mime_type`` together with
    ``is_complete``; the check constraint below rejects any row that
    is only partially complete.

    ``name`` is for display only; content lives under the
    backend-relative ``storage_path`` (``files/<uuid>``).
    """

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Display name, not used as a storage key',
    )

    size = models.BigIntegerField(
        null=True,
        blank=True,
        help_text='Content size in bytes',
    )

    storage_path = models.CharField(
        max_length=_STORAGE_PATH_MAX_LENGTH,
        null=True,
        blank=True,
        unique=True,
        help_text='Backend-relative key: files/<uuid>',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        null=True,
        blank=True,
        help_text='MIME type sniffed from content via python-magic',
    )

    is_complete = models.BooleanField(
        default=False,
        help_text='Content uploaded and metadata fully populated',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['-created_at', '-id']

        constraints = [
            # Content fields are set all together with is_complete
            models.CheckConstraint(
                condition=(
                    models.Q(
                        is_complete=True,
                        size__isnull=False,
                        storage_path__isnull=False,
                        mime_type__isnull=False,
                    ) | models.Q(
                        is_complete=False,
                        size__isnull=True,
                        storage_path__isnull=True,
                        mime_type__isnull=True,
                    )
                ),
                name='files_complete_fields_consistent',
            ),
            models.CheckConstraint(
                condition=models.Q(size__gte=0) | models.Q(size__isnull=True),
                name='files_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.name} (#{self.pk})'

    @property
    def has_content(self) -> bool:
        """Whether a blob backs this file."""
        return self.is_complete and bool(self.storage_path)
