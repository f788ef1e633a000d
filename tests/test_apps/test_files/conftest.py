"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.apps import apps
from moto import mock_aws

from server.apps.files.infrastructure.filesystem import FilesystemStorage
from server.apps.files.infrastructure.object_storage import ObjectStorage
from server.apps.files.models import File

_TEST_BUCKET = 'docport-test'


@pytest.fixture
def fs_storage(tmp_path):
    """Filesystem storage rooted in a temporary directory.

    Returns:
        FilesystemStorage instance.
    """
    return FilesystemStorage(tmp_path / 'blobs')


@pytest.fixture
def app_storage(fs_storage, monkeypatch):
    """Replace the app-wide storage with ``fs_storage``.

    Returns:
        The storage views and commands will now use.
    """
    files_config = apps.get_app_config('files')
    monkeypatch.setitem(files_config.__dict__, 'storage', fs_storage)
    return fs_storage


@pytest.fixture
def mock_s3(monkeypatch):
    """Mock S3 service with the test bucket.

    Yields:
        boto3 S3 resource with the test bucket created.
    """
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=_TEST_BUCKET)
        yield conn


@pytest.fixture
def s3_storage(mock_s3):
    """Object storage bound to the mocked bucket.

    Returns:
        ObjectStorage instance.
    """
    return ObjectStorage(
        bucket_name=_TEST_BUCKET,
        access_key='testing',
        secret_key='testing',
        region_name='us-east-1',
    )


@pytest.fixture
def pending_file(db):
    """Metadata-only file waiting for content.

    Returns:
        Incomplete File instance.
    """
    return File.objects.create(name='a.pdf')
