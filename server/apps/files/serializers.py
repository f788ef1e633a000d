"""Serializers for files API."""

from typing import Final

from rest_framework import serializers

from server.apps.files.models import File

_NAME_MAX_LENGTH: Final = 255


class FileSerializer(serializers.ModelSerializer):
    """Read-only representation of a File record.

    ``storage_path`` stays internal; clients address content through
    the download endpoint.
    """

    class Meta:
        model = File
        fields = [
            'id',
            'name',
            'size',
            'mime_type',
            'is_complete',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class CreateFileSerializer(serializers.Serializer):
    """Input for creating a metadata-only file."""

    name = serializers.CharField(max_length=_NAME_MAX_LENGTH)


class UploadFileSerializer(serializers.Serializer):
    """Multipart input for uploading file content."""

    file = serializers.FileField(allow_empty_file=True)
    size = serializers.IntegerField(required=False, min_value=0)


class FileListQuerySerializer(serializers.Serializer):
    """Query parameters accepted by the file list endpoint."""

    version_id = serializers.IntegerField(required=False, min_value=1)
