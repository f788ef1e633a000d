"""Tests for S3-compatible blob storage against a mocked bucket."""

import threading
from io import BytesIO

import pytest

from server.apps.files.exceptions import (
    BlobNotFoundError,
    StorageCancelledError,
    StoragePathError,
)


def test_save_and_retrieve(s3_storage):
    """Test saved bytes come back unchanged."""
    written = s3_storage.save('files/doc', BytesIO(b'Hello, World!'))

    assert written == 13
    stream = s3_storage.retrieve('files/doc')
    try:
        assert stream.read() == b'Hello, World!'
    finally:
        stream.close()


def test_save_empty_content(s3_storage, mock_s3):
    """Test empty content is stored as an empty object."""
    assert s3_storage.save('empty', BytesIO(b'')) == 0

    assert mock_s3.Object('docport-test', 'empty').content_length == 0


def test_save_overwrites_existing(s3_storage, mock_s3):
    """Test the key is kept as given and the second save wins."""
    s3_storage.save('doc', BytesIO(b'first'))
    s3_storage.save('doc', BytesIO(b'second'))

    body = mock_s3.Object('docport-test', 'doc').get()['Body'].read()
    assert body == b'second'


def test_cancelled_save(s3_storage):
    """Test a cancelled save uploads nothing."""
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(StorageCancelledError):
        s3_storage.save('doc', BytesIO(b'data'), cancel=cancel)

    with pytest.raises(BlobNotFoundError):
        s3_storage.retrieve('doc')


def test_retrieve_missing(s3_storage):
    """Test retrieving a missing key."""
    with pytest.raises(BlobNotFoundError):
        s3_storage.retrieve('missing')


def test_delete(s3_storage):
    """Test deleted object can no longer be retrieved."""
    s3_storage.save('doc', BytesIO(b'x'))

    s3_storage.delete('doc')

    with pytest.raises(BlobNotFoundError):
        s3_storage.retrieve('doc')


def test_delete_missing(s3_storage):
    """Test deleting a missing key."""
    with pytest.raises(BlobNotFoundError):
        s3_storage.delete('missing')


def test_traversal_rejected(s3_storage):
    """Test keys escaping the root are rejected before any request."""
    with pytest.raises(StoragePathError):
        s3_storage.save('../escape', BytesIO(b'x'))
    with pytest.raises(StoragePathError):
        s3_storage.retrieve('/absolute')
    with pytest.raises(StoragePathError):
        s3_storage.list('a/../..')


def test_list_is_not_recursive(s3_storage):
    """Test list returns only objects directly under the prefix."""
    s3_storage.save('f1', BytesIO(b'1'))
    s3_storage.save('d1/f2', BytesIO(b'22'))
    s3_storage.save('d1/d2/f3', BytesIO(b'333'))

    assert {info.path for info in s3_storage.list('')} == {'f1'}
    assert {info.path for info in s3_storage.list('d1')} == {'d1/f2'}


def test_list_missing_prefix(s3_storage):
    """Test an unused prefix lists as empty."""
    assert s3_storage.list('nothing-here') == frozenset()


def test_walk_visits_every_object(s3_storage):
    """Test walk covers the whole prefix."""
    s3_storage.save('f1', BytesIO(b'1'))
    s3_storage.save('d1/f2', BytesIO(b'22'))
    s3_storage.save('d1/d2/f3', BytesIO(b'333'))
    visited = []

    s3_storage.walk('', visited.append)

    assert sorted(info.path for info in visited) == ['d1/d2/f3', 'd1/f2', 'f1']
    assert all(info.modified_at is not None for info in visited)


def test_walk_stops_on_visit_error(s3_storage):
    """Test an exception from the callback propagates unchanged."""
    s3_storage.save('f1', BytesIO(b'1'))
    s3_storage.save('f2', BytesIO(b'2'))

    def visit(info):
        raise KeyError(info.path)

    with pytest.raises(KeyError):
        s3_storage.walk('', visit)


def test_rollback_upload_missing_key(s3_storage):
    """Test rollback of a missing key does not raise."""
    s3_storage.rollback_upload('missing')
