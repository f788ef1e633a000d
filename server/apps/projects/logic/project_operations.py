"""Business logic for projects."""

import logging

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from server.apps.projects.exceptions import (
    ProjectAlreadyExistsError,
    ProjectDoesNotExistError,
)
from server.apps.projects.models import Project

logger = logging.getLogger(__name__)


def list_projects() -> QuerySet[Project]:
    """List all projects, newest first."""
    return Project.objects.all()


def get_project(project_id: int) -> Project:
    """Get project by ID.

    Raises:
        ProjectDoesNotExistError: If no project has this ID.
    """
    try:
        return Project.objects.get(pk=project_id)
    except Project.DoesNotExist as error:
        raise ProjectDoesNotExistError(project_id) from error


def create_project(slug: str, name: str) -> Project:
    """Create a project.

    Args:
        slug: Unique URL-safe identifier.
        name: Display name.

    Returns:
        Created Project instance.

    Raises:
        ProjectAlreadyExistsError: If the slug is taken.
    """
    try:
        with transaction.atomic():
            project = Project.objects.create(slug=slug, name=name)
    except IntegrityError as error:
        raise ProjectAlreadyExistsError(slug) from error

    logger.info('Project created: %s (ID: %d)', slug, project.id)
    return project


def update_project(project_id: int, slug: str, name: str) -> Project:
    """Replace a project's slug and name.

    Raises:
        ProjectDoesNotExistError: If no project has this ID.
        ProjectAlreadyExistsError: If the new slug is taken.
    """
    project = get_project(project_id)
    project.slug = slug
    project.name = name
    try:
        with transaction.atomic():
            project.save(update_fields=['slug', 'name', 'updated_at'])
    except IntegrityError as error:
        raise ProjectAlreadyExistsError(slug) from error

    logger.info('Project updated: %s (ID: %d)', slug, project_id)
    return project


def delete_project(project_id: int) -> None:
    """Delete a project together with its versions.

    Files attached to those versions are kept; only the association
    rows go away.

    Raises:
        ProjectDoesNotExistError: If no project has this ID.
    """
    deleted, _ = Project.objects.filter(pk=project_id).delete()
    if not deleted:
        raise ProjectDoesNotExistError(project_id)
    logger.info('Project deleted: ID=%d', project_id)
