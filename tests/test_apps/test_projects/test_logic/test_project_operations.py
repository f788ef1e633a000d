"""Tests for project business logic."""

import pytest

from server.apps.files.models import File
from server.apps.projects.exceptions import (
    ProjectAlreadyExistsError,
    ProjectDoesNotExistError,
)
from server.apps.projects.logic.project_operations import (
    create_project,
    delete_project,
    get_project,
    list_projects,
    update_project,
)
from server.apps.projects.models import Project, Version


@pytest.mark.django_db
def test_create_project():
    """Test project is created with slug and name."""
    project = create_project('docport', 'Docport')

    assert project.id is not None
    assert get_project(project.id).slug == 'docport'


@pytest.mark.django_db
def test_create_project_duplicate_slug(project):
    """Test slugs are unique."""
    with pytest.raises(ProjectAlreadyExistsError):
        create_project(project.slug, 'Other')

    assert Project.objects.count() == 1


@pytest.mark.django_db
def test_get_project_not_found():
    """Test missing ID raises."""
    with pytest.raises(ProjectDoesNotExistError):
        get_project(99999)


@pytest.mark.django_db
def test_update_project(project):
    """Test slug and name are replaced."""
    updated = update_project(project.id, slug='renamed', name='Renamed')

    assert updated.slug == 'renamed'
    assert Project.objects.get(pk=project.id).name == 'Renamed'


@pytest.mark.django_db
def test_update_project_slug_taken(project):
    """Test renaming onto an existing slug conflicts."""
    other = create_project('other', 'Other')

    with pytest.raises(ProjectAlreadyExistsError):
        update_project(other.id, slug=project.slug, name='Other')


@pytest.mark.django_db
def test_delete_project_cascades_versions(version, document):
    """Test deleting a project removes versions but not files."""
    version.files.add(document)

    delete_project(version.project_id)

    assert not Version.objects.exists()
    assert File.objects.filter(pk=document.pk).exists()


@pytest.mark.django_db
def test_delete_project_not_found():
    """Test deleting missing project raises."""
    with pytest.raises(ProjectDoesNotExistError):
        delete_project(99999)


@pytest.mark.django_db
def test_list_projects(project):
    """Test list returns every project."""
    assert list(list_projects()) == [project]
