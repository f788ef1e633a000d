"""Tests for domain error to HTTP response mapping."""

import pytest
from rest_framework.exceptions import ValidationError

from server.apps.files.exceptions import (
    BlobNotFoundError,
    FileAlreadyCompleteError,
    FileNotCompleteError,
    StorageError,
    StoragePathError,
)
from server.apps.projects.exceptions import VersionFileDoesNotExistError
from server.exception_handler import domain_exception_handler


@pytest.mark.parametrize(('error', 'status_code'), [
    (BlobNotFoundError('retrieve', 'files/x'), 404),
    (VersionFileDoesNotExistError(1, 2), 404),
    (FileAlreadyCompleteError(1), 409),
    (FileNotCompleteError(1), 400),
    (StoragePathError('save', '../x', 'key escapes storage root'), 400),
    (StorageError('save', 'files/x', 'disk full'), 500),
])
def test_domain_errors_mapped(error, status_code):
    """Test each error class gets its status code."""
    response = domain_exception_handler(error, {})

    assert response.status_code == status_code
    assert 'detail' in response.data


def test_storage_error_detail_hidden():
    """Test internal storage failures do not leak their reason."""
    response = domain_exception_handler(
        StorageError('save', 'files/x', '/var/lib/secret: disk full'),
        {},
    )

    assert response.data == {'detail': 'Storage operation failed'}


def test_drf_errors_delegated():
    """Test DRF's own exceptions keep DRF's handling."""
    response = domain_exception_handler(ValidationError({'name': ['bad']}), {})

    assert response.status_code == 400
    assert response.data == {'name': ['bad']}


def test_unknown_errors_left_to_django():
    """Test unexpected exceptions are not turned into responses."""
    assert domain_exception_handler(RuntimeError('boom'), {}) is None
