"""Tests for projects and versions REST endpoints."""

import pytest
from rest_framework.test import APIClient

from server.apps.projects.models import Project, VersionFile


@pytest.fixture
def api_client():
    """Unauthenticated API client.

    Returns:
        APIClient instance.
    """
    return APIClient()


@pytest.mark.django_db
def test_create_project(api_client):
    """Test POST creates a project."""
    response = api_client.post(
        '/api/v1/projects/',
        {'slug': 'docport', 'name': 'Docport'},
        format='json',
    )

    assert response.status_code == 201
    assert response.data['slug'] == 'docport'


@pytest.mark.django_db
def test_create_project_conflict(api_client, project):
    """Test duplicate slug returns 409."""
    response = api_client.post(
        '/api/v1/projects/',
        {'slug': project.slug, 'name': 'Again'},
        format='json',
    )

    assert response.status_code == 409


@pytest.mark.django_db
def test_partial_update_project(api_client, project):
    """Test PATCH keeps omitted fields."""
    response = api_client.patch(
        f'/api/v1/projects/{project.id}/',
        {'name': 'Renamed'},
        format='json',
    )

    assert response.status_code == 200
    assert response.data['name'] == 'Renamed'
    assert response.data['slug'] == project.slug


@pytest.mark.django_db
def test_delete_project(api_client, project):
    """Test DELETE removes the project."""
    response = api_client.delete(f'/api/v1/projects/{project.id}/')

    assert response.status_code == 204
    assert not Project.objects.exists()


@pytest.mark.django_db
def test_create_version(api_client, project):
    """Test POST creates a version under a project."""
    response = api_client.post(
        '/api/v1/versions/',
        {'project_id': project.id, 'name': '1.0'},
        format='json',
    )

    assert response.status_code == 201
    assert response.data['project_id'] == project.id
    assert response.data['file_ids'] == []


@pytest.mark.django_db
def test_create_version_missing_project(api_client):
    """Test unknown project returns 404."""
    response = api_client.post(
        '/api/v1/versions/',
        {'project_id': 99999, 'name': '1.0'},
        format='json',
    )

    assert response.status_code == 404


@pytest.mark.django_db
def test_list_versions_by_project(api_client, version):
    """Test list filters by project_id."""
    response = api_client.get('/api/v1/versions/', {'project_id': version.project_id})

    assert response.status_code == 200
    assert [item['id'] for item in response.data['results']] == [version.id]


@pytest.mark.django_db
def test_attach_and_detach_file(api_client, version, document):
    """Test attach-file and detach-file actions."""
    url = f'/api/v1/versions/{version.id}'

    response = api_client.post(
        f'{url}/attach-file/',
        {'file_id': document.id},
        format='json',
    )
    assert response.status_code == 204
    assert api_client.get(f'{url}/').data['file_ids'] == [document.id]

    response = api_client.post(
        f'{url}/detach-file/',
        {'file_id': document.id},
        format='json',
    )
    assert response.status_code == 204
    assert not VersionFile.objects.exists()


@pytest.mark.django_db
def test_attach_file_twice_conflicts(api_client, version, document):
    """Test attaching the same pair again returns 409."""
    url = f'/api/v1/versions/{version.id}/attach-file/'
    api_client.post(url, {'file_id': document.id}, format='json')

    response = api_client.post(url, {'file_id': document.id}, format='json')

    assert response.status_code == 409


@pytest.mark.django_db
def test_detach_not_attached(api_client, version, document):
    """Test detaching an unattached file returns 404."""
    response = api_client.post(
        f'/api/v1/versions/{version.id}/detach-file/',
        {'file_id': document.id},
        format='json',
    )

    assert response.status_code == 404


@pytest.mark.django_db
def test_files_filtered_by_version(api_client, version, document):
    """Test the files list can be narrowed to one version."""
    api_client.post(
        f'/api/v1/versions/{version.id}/attach-file/',
        {'file_id': document.id},
        format='json',
    )
    api_client.post('/api/v1/files/', {'name': 'other.txt'}, format='json')

    response = api_client.get('/api/v1/files/', {'version_id': version.id})

    assert [item['id'] for item in response.data['results']] == [document.id]
