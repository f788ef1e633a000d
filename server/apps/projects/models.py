"""Database models for projects app."""

from typing import Final, final, override

from django.db import models

from server.apps.files.models import File

# Constants for field max lengths
_SLUG_MAX_LENGTH: Final = 100
_NAME_MAX_LENGTH: Final = 255


@final
class Project(models.Model):
    """Top-level container owning zero or more versions.

    Deleting a project deletes its versions; files attached to those
    versions are left alone.
    """

    slug = models.SlugField(
        max_length=_SLUG_MAX_LENGTH,
        unique=True,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Project'  # type: ignore[mutable-override]
        verbose_name_plural = 'Projects'  # type: ignore[mutable-override]
        ordering = ['-created_at', '-id']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.slug


@final
class Version(models.Model):
    """Named release of a project.

    Files are attached through ``VersionFile``; a version does not
    own its files, so detaching or deleting it never deletes one.
    """

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='versions',
        db_index=True,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    description = models.TextField(
        null=True,
        blank=True,
    )

    files = models.ManyToManyField(
        File,
        through='VersionFile',
        related_name='versions',
        blank=True,
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Version'  # type: ignore[mutable-override]
        verbose_name_plural = 'Versions'  # type: ignore[mutable-override]
        ordering = ['-created_at', '-id']

        constraints = [
            # Version names are unique within a project
            models.UniqueConstraint(
                fields=['project', 'name'],
                name='versions_project_name_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.project.slug}:{self.name}'


@final
class VersionFile(models.Model):
    """Association row linking one file to one version."""

    version = models.ForeignKey(
        Version,
        on_delete=models.CASCADE,
        related_name='file_links',
    )

    file = models.ForeignKey(
        File,
        on_delete=models.CASCADE,
        related_name='version_links',
    )

    attached_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Version file'  # type: ignore[mutable-override]
        verbose_name_plural = 'Version files'  # type: ignore[mutable-override]

        constraints = [
            # At most one association row per (version, file) pair
            models.UniqueConstraint(
                fields=['version', 'file'],
                name='version_files_version_file_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.version_id}:{self.file_id}'
