"""Shared fixtures for projects app tests."""

import pytest

from server.apps.files.models import File
from server.apps.projects.models import Project, Version


@pytest.fixture
def project(db):
    """Create test project.

    Returns:
        Project instance.
    """
    return Project.objects.create(slug='docport', name='Docport')


@pytest.fixture
def version(project):
    """Create test version of ``project``.

    Returns:
        Version instance.
    """
    return Version.objects.create(project=project, name='1.0')


@pytest.fixture
def document(db):
    """Create a metadata-only file.

    Returns:
        File instance.
    """
    return File.objects.create(name='a.pdf')
