"""Tests for storage backend selection."""

import pytest
from django.core.exceptions import ImproperlyConfigured

from server.apps.files.infrastructure.factory import (
    StorageConfig,
    StorageProvider,
    build_storage,
    get_storage,
)
from server.apps.files.infrastructure.filesystem import FilesystemStorage
from server.apps.files.infrastructure.object_storage import ObjectStorage


def test_config_defaults_to_filesystem(tmp_path):
    """Test provider falls back to the filesystem."""
    config = StorageConfig.from_settings({'PATH': str(tmp_path)})

    assert config.provider is StorageProvider.FILESYSTEM
    assert config.path == str(tmp_path)


def test_config_blank_values_become_none():
    """Test unset env entries do not leak in as empty strings."""
    config = StorageConfig.from_settings({
        'PROVIDER': 's3',
        'BUCKET_NAME': 'docs',
        'ACCESS_KEY': '',
        'ENDPOINT_URL': '',
    })

    assert config.provider is StorageProvider.S3
    assert config.access_key is None
    assert config.endpoint_url is None


def test_config_unknown_provider():
    """Test an unsupported provider is a configuration error."""
    with pytest.raises(ImproperlyConfigured):
        StorageConfig.from_settings({'PROVIDER': 'ftp'})


def test_build_filesystem_storage(tmp_path):
    """Test filesystem provider builds a FilesystemStorage."""
    config = StorageConfig(
        provider=StorageProvider.FILESYSTEM,
        path=str(tmp_path),
    )

    storage = build_storage(config)

    assert isinstance(storage, FilesystemStorage)
    assert storage.root == tmp_path.resolve()


def test_build_filesystem_storage_without_path():
    """Test filesystem provider needs a path."""
    with pytest.raises(ImproperlyConfigured):
        build_storage(StorageConfig(provider=StorageProvider.FILESYSTEM))


def test_build_object_storage(mock_s3):
    """Test s3 provider builds an ObjectStorage."""
    config = StorageConfig(
        provider=StorageProvider.S3,
        bucket_name='docport-test',
        region_name='us-east-1',
    )

    storage = build_storage(config)

    assert isinstance(storage, ObjectStorage)
    assert storage.bucket_name == 'docport-test'


def test_build_object_storage_without_bucket():
    """Test s3 provider needs a bucket."""
    with pytest.raises(ImproperlyConfigured):
        build_storage(StorageConfig(provider=StorageProvider.S3))


def test_get_storage_returns_app_storage(app_storage):
    """Test the app-wide storage is shared."""
    assert get_storage() is app_storage
