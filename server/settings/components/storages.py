"""Blob storage configuration.

``BLOB_STORAGE`` selects the backend holding uploaded file content:
- ``filesystem`` keeps blobs under ``PATH`` on local disk
- ``s3`` keeps blobs in an S3-compatible bucket (MinIO, R2, AWS)

The dict is read once at startup into an immutable ``StorageConfig``.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

BLOB_STORAGE: Final[dict[str, Any]] = {
    'PROVIDER': config('STORAGE_PROVIDER', default='filesystem'),
    'PATH': config(
        'STORAGE_PATH',
        default=str(BASE_DIR.joinpath('storage')),
    ),
    'BUCKET_NAME': config('AWS_STORAGE_BUCKET_NAME', default='docport'),
    'ACCESS_KEY': config('AWS_ACCESS_KEY_ID', default=None),
    'SECRET_KEY': config('AWS_SECRET_ACCESS_KEY', default=None),
    'ENDPOINT_URL': config('AWS_S3_ENDPOINT_URL', default=None),
    'REGION_NAME': config('AWS_S3_REGION_NAME', default='auto'),
}

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        # Keep static files separate from user files
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
