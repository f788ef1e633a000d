"""Business logic for versions and their file associations.

A version references files; it does not own them. Attaching creates
one ``VersionFile`` row per (version, file) pair, detaching removes
it, and neither touches the File itself or its stored content.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import FileDoesNotExistError
from server.apps.files.models import File
from server.apps.projects.exceptions import (
    FileAlreadyAttachedError,
    ProjectDoesNotExistError,
    VersionAlreadyExistsError,
    VersionDoesNotExistError,
    VersionFileDoesNotExistError,
)
from server.apps.projects.models import Project, Version, VersionFile

logger = logging.getLogger(__name__)


def list_versions(project_id: int | None = None) -> QuerySet[Version]:
    """List versions, optionally only those of one project.

    Args:
        project_id: Restrict to versions of this project.

    Returns:
        QuerySet of Version objects, newest first.
    """
    versions = Version.objects.select_related('project')
    if project_id is not None:
        versions = versions.filter(project_id=project_id)
    return versions


def get_version(version_id: int) -> Version:
    """Get version by ID.

    Raises:
        VersionDoesNotExistError: If no version has this ID.
    """
    try:
        return Version.objects.select_related('project').get(pk=version_id)
    except Version.DoesNotExist as error:
        raise VersionDoesNotExistError(version_id) from error


def create_version(
    project_id: int,
    name: str,
    description: str | None = None,
) -> Version:
    """Create a version under a project.

    Args:
        project_id: Owning project.
        name: Version name, unique within the project.
        description: Optional free text.

    Returns:
        Created Version instance.

    Raises:
        ProjectDoesNotExistError: If the project does not exist.
        VersionAlreadyExistsError: If the name is taken in the project.
    """
    if not Project.objects.filter(pk=project_id).exists():
        raise ProjectDoesNotExistError(project_id)

    try:
        with transaction.atomic():
            version = Version.objects.create(
                project_id=project_id,
                name=name,
                description=description,
            )
    except IntegrityError as error:
        raise VersionAlreadyExistsError(project_id, name) from error

    logger.info(
        'Version created: %s (ID: %d, project ID: %d)',
        name,
        version.id,
        project_id,
    )
    return version


def update_version(
    version_id: int,
    name: str,
    description: str | None,
) -> Version:
    """Replace a version's name and description.

    Raises:
        VersionDoesNotExistError: If no version has this ID.
        VersionAlreadyExistsError: If the new name is taken.
    """
    version = get_version(version_id)
    version.name = name
    version.description = description
    try:
        with transaction.atomic():
            version.save(update_fields=['name', 'description', 'updated_at'])
    except IntegrityError as error:
        raise VersionAlreadyExistsError(version.project_id, name) from error

    logger.info('Version updated: %s (ID: %d)', name, version_id)
    return version


def delete_version(version_id: int) -> None:
    """Delete a version and its file associations (not the files).

    Raises:
        VersionDoesNotExistError: If no version has this ID.
    """
    deleted, _ = Version.objects.filter(pk=version_id).delete()
    if not deleted:
        raise VersionDoesNotExistError(version_id)
    logger.info('Version deleted: ID=%d', version_id)


def attach_file(version_id: int, file_id: int) -> VersionFile:
    """Attach a file to a version.

    Args:
        version_id: Target version.
        file_id: File to attach.

    Returns:
        Created association row.

    Raises:
        VersionDoesNotExistError: If the version does not exist.
        FileDoesNotExistError: If the file does not exist.
        FileAlreadyAttachedError: If the pair is already attached.
    """
    if not Version.objects.filter(pk=version_id).exists():
        raise VersionDoesNotExistError(version_id)
    if not File.objects.filter(pk=file_id).exists():
        raise FileDoesNotExistError(file_id)

    try:
        with transaction.atomic():
            link = VersionFile.objects.create(
                version_id=version_id,
                file_id=file_id,
            )
    except IntegrityError as error:
        if _is_attached(version_id, file_id):
            raise FileAlreadyAttachedError(version_id, file_id) from error
        logger.exception(
            'Failed to attach file %d to version %d',
            file_id,
            version_id,
        )
        raise

    logger.info('File %d attached to version %d', file_id, version_id)
    return link


def detach_file(version_id: int, file_id: int) -> None:
    """Detach a file from a version; the file itself is kept.

    Args:
        version_id: Version to detach from.
        file_id: File to detach.

    Raises:
        VersionDoesNotExistError: If the version does not exist.
        VersionFileDoesNotExistError: If the file is not attached.
    """
    if not Version.objects.filter(pk=version_id).exists():
        raise VersionDoesNotExistError(version_id)

    deleted, _ = VersionFile.objects.filter(
        version_id=version_id,
        file_id=file_id,
    ).delete()
    if not deleted:
        raise VersionFileDoesNotExistError(version_id, file_id)

    logger.info('File %d detached from version %d', file_id, version_id)


def _is_attached(version_id: int, file_id: int) -> bool:
    return VersionFile.objects.filter(
        version_id=version_id,
        file_id=file_id,
    ).exists()
