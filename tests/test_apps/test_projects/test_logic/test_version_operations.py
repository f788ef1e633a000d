"""Tests for version and file association business logic."""

import pytest

from server.apps.files.exceptions import (
    ConflictError,
    FileDoesNotExistError,
    NotFoundError,
)
from server.apps.files.infrastructure.filesystem import FilesystemStorage
from server.apps.files.logic.file_operations import delete_file, list_files
from server.apps.files.models import File
from server.apps.projects.exceptions import (
    FileAlreadyAttachedError,
    ProjectDoesNotExistError,
    VersionAlreadyExistsError,
    VersionDoesNotExistError,
    VersionFileDoesNotExistError,
)
from server.apps.projects.logic.project_operations import create_project
from server.apps.projects.logic.version_operations import (
    attach_file,
    create_version,
    delete_version,
    detach_file,
    get_version,
    list_versions,
    update_version,
)
from server.apps.projects.models import Version, VersionFile


@pytest.mark.django_db
def test_create_version(project):
    """Test version is created under its project."""
    version = create_version(project.id, '2.0', 'Second release')

    assert version.project == project
    assert get_version(version.id).description == 'Second release'


@pytest.mark.django_db
def test_create_version_missing_project():
    """Test the project must exist."""
    with pytest.raises(ProjectDoesNotExistError):
        create_version(99999, '1.0')


@pytest.mark.django_db
def test_create_version_duplicate_name(version):
    """Test names are unique within a project."""
    with pytest.raises(VersionAlreadyExistsError):
        create_version(version.project_id, version.name)


@pytest.mark.django_db
def test_same_version_name_in_other_project(version):
    """Test names only clash within one project."""
    other = create_project('other', 'Other')

    assert create_version(other.id, version.name).name == version.name


@pytest.mark.django_db
def test_update_version(version):
    """Test name and description are replaced."""
    updated = update_version(version.id, name='1.1', description=None)

    assert updated.name == '1.1'
    assert Version.objects.get(pk=version.id).description is None


@pytest.mark.django_db
def test_list_versions_by_project(version):
    """Test filtering by project."""
    assert list(list_versions(version.project_id)) == [version]
    assert list(list_versions(99999)) == []


@pytest.mark.django_db
def test_get_version_not_found():
    """Test missing ID raises."""
    with pytest.raises(VersionDoesNotExistError):
        get_version(99999)


@pytest.mark.django_db
def test_attach_file(version, document):
    """Test attaching creates exactly one association."""
    attach_file(version.id, document.id)

    assert list(version.files.all()) == [document]
    assert list(list_files(version.id)) == [document]


@pytest.mark.django_db
def test_attach_file_twice(version, document):
    """Test attaching the same pair again conflicts."""
    attach_file(version.id, document.id)

    with pytest.raises(FileAlreadyAttachedError) as exc_info:
        attach_file(version.id, document.id)

    assert isinstance(exc_info.value, ConflictError)
    assert VersionFile.objects.count() == 1


@pytest.mark.django_db
def test_attach_missing_file(version):
    """Test the file must exist."""
    with pytest.raises(FileDoesNotExistError):
        attach_file(version.id, 99999)


@pytest.mark.django_db
def test_attach_to_missing_version(document):
    """Test the version must exist."""
    with pytest.raises(VersionDoesNotExistError):
        attach_file(99999, document.id)


@pytest.mark.django_db
def test_attach_file_to_many_versions(version, document):
    """Test one file can belong to several versions."""
    other = create_version(version.project_id, '2.0')

    attach_file(version.id, document.id)
    attach_file(other.id, document.id)

    assert set(document.versions.all()) == {version, other}


@pytest.mark.django_db
def test_detach_file(version, document):
    """Test detaching removes the association, not the file."""
    attach_file(version.id, document.id)

    detach_file(version.id, document.id)

    assert not version.files.exists()
    assert File.objects.filter(pk=document.id).exists()


@pytest.mark.django_db
def test_detach_not_attached(version, document):
    """Test detaching a pair that is not attached is not found."""
    with pytest.raises(VersionFileDoesNotExistError) as exc_info:
        detach_file(version.id, document.id)

    assert isinstance(exc_info.value, VersionDoesNotExistError)
    assert isinstance(exc_info.value, NotFoundError)


@pytest.mark.django_db
def test_detach_from_missing_version(document):
    """Test the version must exist."""
    with pytest.raises(VersionDoesNotExistError):
        detach_file(99999, document.id)


@pytest.mark.django_db
def test_delete_version_keeps_files(version, document):
    """Test deleting a version leaves attached files alone."""
    attach_file(version.id, document.id)

    delete_version(version.id)

    assert not VersionFile.objects.exists()
    assert File.objects.filter(pk=document.id).exists()


@pytest.mark.django_db
def test_delete_file_detaches_it(version, document, tmp_path):
    """Test deleting a file removes its associations."""
    attach_file(version.id, document.id)

    delete_file(FilesystemStorage(tmp_path), document.id)

    assert not version.files.exists()
