"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.infrastructure.factory import get_storage
from server.apps.files.logic.file_operations import delete_file
from server.apps.files.models import File


@admin.register(File)
class FileAdmin(admin.ModelAdmin):
    """Admin interface for File model.

    Content fields are read-only: they are only ever written by the
    upload flow. Deletes go through ``delete_file`` so the stored
    blob is removed together with the row.
    """

    list_display = [
        'name',
        'is_complete',
        'size_display',
        'mime_type',
        'created_at',
    ]

    list_filter = [
        'is_complete',
        'mime_type',
        'created_at',
    ]

    search_fields = [
        'name',
        'storage_path',
    ]

    readonly_fields = [
        'size',
        'storage_path',
        'mime_type',
        'is_complete',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('File Information', {
            'fields': ('name',),
        }),
        ('Content', {
            'fields': (
                'is_complete',
                'storage_path',
                'size',
                'mime_type',
            ),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string, or '-' before upload.
        """
        if obj.size is None:
            return '-'
        return _format_bytes(obj.size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def delete_model(self, request: HttpRequest, obj: File) -> None:
        """Delete a single file with its stored content."""
        delete_file(get_storage(), obj.pk)

    def delete_queryset(self, request: HttpRequest, queryset: QuerySet[File]) -> None:
        """Delete selected files one by one with their stored content."""
        storage = get_storage()
        for file_id in queryset.values_list('pk', flat=True):
            delete_file(storage, file_id)


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted string (e.g., '1.5 GB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'
