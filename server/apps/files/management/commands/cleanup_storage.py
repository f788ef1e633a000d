"""Management command to remove unreferenced content from blob storage."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.files.infrastructure.factory import get_storage
from server.apps.files.infrastructure.storage import ObjectInfo
from server.apps.files.models import File

_CONTENT_ROOT: Final = 'files'
_DEFAULT_MIN_AGE_HOURS: Final = 24
_REFERENCE_BATCH_SIZE: Final = 500  # Stays below SQLite's bound-parameter limit

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete orphaned blobs and stale temp files from storage.

    A blob is orphaned when no File row references its key, which
    happens when a rollback or a post-delete blob removal failed.
    Only entries older than ``--min-age-hours`` are touched, so
    uploads still in flight are left alone.
    """

    help = 'Remove orphaned blobs and stale temporary uploads from storage'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--min-age-hours',
            type=int,
            default=_DEFAULT_MIN_AGE_HOURS,
            help=(
                'Only remove entries older than this many hours '
                f'(default: {_DEFAULT_MIN_AGE_HOURS})'
            ),
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        min_age = timedelta(hours=options['min_age_hours'])
        cutoff = timezone.now() - min_age
        storage = get_storage()

        self.stdout.write(
            f'Looking for orphaned blobs under {_CONTENT_ROOT}/ '
            f'modified before {cutoff}',
        )

        candidates: list[ObjectInfo] = []

        def collect(info: ObjectInfo) -> None:
            if info.modified_at is None or info.modified_at <= cutoff:
                candidates.append(info)

        storage.walk(_CONTENT_ROOT, collect)

        referenced = _referenced_paths([info.path for info in candidates])
        orphans = [info for info in candidates if info.path not in referenced]

        count = 0
        failed = 0
        for orphan in orphans:
            if dry_run:
                self.stdout.write(
                    f'Would delete: {orphan.path} ({orphan.size} bytes)',
                )
                count += 1
                continue

            try:
                storage.delete(orphan.path)
                count += 1
                logger.info('Removed orphaned blob: %s', orphan.path)
            except Exception as exc:
                self.stderr.write(f'Failed to delete {orphan.path}: {exc}')
                logger.exception('Failed to remove orphaned blob: %s', orphan.path)
                failed += 1

        stale_uploads = storage.purge_stale_uploads(min_age, dry_run=dry_run)
        for temp_path in stale_uploads:
            verb = 'Would delete' if dry_run else 'Deleted'
            self.stdout.write(f'{verb} temporary upload: {temp_path}')

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Would remove {count} orphaned blobs and '
                    f'{len(stale_uploads)} temporary uploads',
                ),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Removed {count} orphaned blobs, {failed} failed, '
                    f'{len(stale_uploads)} temporary uploads',
                ),
            )


def _referenced_paths(paths: list[str]) -> set[str]:
    """Return the subset of ``paths`` some File row points to.

    Args:
        paths: Storage keys found in the backend.

    Returns:
        Keys still referenced by the database.
    """
    referenced: set[str] = set()
    for start in range(0, len(paths), _REFERENCE_BATCH_SIZE):
        batch = paths[start:start + _REFERENCE_BATCH_SIZE]
        referenced.update(
            File.objects.filter(
                storage_path__in=batch,
            ).values_list('storage_path', flat=True),
        )
    return referenced
