"""Serializers for projects API."""

from typing import Final

from rest_framework import serializers

from server.apps.projects.models import Project, Version

_SLUG_MAX_LENGTH: Final = 100
_NAME_MAX_LENGTH: Final = 255


class ProjectSerializer(serializers.ModelSerializer):
    """Read-only representation of a Project."""

    class Meta:
        model = Project
        fields = [
            'id',
            'slug',
            'name',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ProjectInputSerializer(serializers.Serializer):
    """Input for creating or updating a project."""

    slug = serializers.SlugField(max_length=_SLUG_MAX_LENGTH)
    name = serializers.CharField(max_length=_NAME_MAX_LENGTH)


class VersionSerializer(serializers.ModelSerializer):
    """Read-only representation of a Version with its attached file IDs."""

    project_id = serializers.IntegerField(read_only=True)
    file_ids = serializers.SerializerMethodField()

    class Meta:
        model = Version
        fields = [
            'id',
            'project_id',
            'name',
            'description',
            'file_ids',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_file_ids(self, obj: Version) -> list[int]:
        """IDs of files attached to the version, in attach order."""
        return list(
            obj.file_links.order_by('attached_at', 'id').values_list(
                'file_id',
                flat=True,
            ),
        )


class CreateVersionSerializer(serializers.Serializer):
    """Input for creating a version."""

    project_id = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=_NAME_MAX_LENGTH)
    description = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
    )


class UpdateVersionSerializer(serializers.Serializer):
    """Input for updating a version; omitted fields stay unchanged."""

    name = serializers.CharField(max_length=_NAME_MAX_LENGTH, required=False)
    description = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
    )


class AttachFileSerializer(serializers.Serializer):
    """Input for attaching or detaching a file."""

    file_id = serializers.IntegerField(min_value=1)


class VersionListQuerySerializer(serializers.Serializer):
    """Query parameters accepted by the version list endpoint."""

    project_id = serializers.IntegerField(required=False, min_value=1)
