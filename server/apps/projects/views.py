"""REST endpoints for projects and versions.

Views only parse input and serialize output; every state change goes
through ``logic``. Domain errors are rendered by
``server.exception_handler``.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from server.apps.projects.logic.project_operations import (
    create_project,
    delete_project,
    get_project,
    list_projects,
    update_project,
)
from server.apps.projects.logic.version_operations import (
    attach_file,
    create_version,
    delete_version,
    detach_file,
    get_version,
    list_versions,
    update_version,
)
from server.apps.projects.serializers import (
    AttachFileSerializer,
    CreateVersionSerializer,
    ProjectInputSerializer,
    ProjectSerializer,
    UpdateVersionSerializer,
    VersionListQuerySerializer,
    VersionSerializer,
)


class ProjectViewSet(viewsets.GenericViewSet):
    """Project CRUD."""

    serializer_class = ProjectSerializer
    lookup_value_regex = r'\d+'

    def list(self, request: Request) -> Response:
        """List projects."""
        page = self.paginate_queryset(list_projects())
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str) -> Response:
        """Get one project."""
        return Response(self.get_serializer(get_project(int(pk))).data)

    def create(self, request: Request) -> Response:
        """Create a project."""
        serializer = ProjectInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        project = create_project(**serializer.validated_data)
        return Response(
            self.get_serializer(project).data,
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, pk: str) -> Response:
        """Update slug and/or name of a project."""
        project = get_project(int(pk))
        serializer = ProjectInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        project = update_project(
            project.id,
            slug=serializer.validated_data.get('slug', project.slug),
            name=serializer.validated_data.get('name', project.name),
        )
        return Response(self.get_serializer(project).data)

    def destroy(self, request: Request, pk: str) -> Response:
        """Delete a project and its versions."""
        delete_project(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)


class VersionViewSet(viewsets.GenericViewSet):
    """Version CRUD plus file association.

    - ``POST /versions/{id}/attach-file/`` with ``{"file_id": ...}``
    - ``POST /versions/{id}/detach-file/`` with ``{"file_id": ...}``
    """

    serializer_class = VersionSerializer
    lookup_value_regex = r'\d+'

    def list(self, request: Request) -> Response:
        """List versions, optionally filtered by ``project_id``."""
        query = VersionListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        versions = list_versions(query.validated_data.get('project_id'))
        page = self.paginate_queryset(versions)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str) -> Response:
        """Get one version."""
        return Response(self.get_serializer(get_version(int(pk))).data)

    def create(self, request: Request) -> Response:
        """Create a version under a project."""
        serializer = CreateVersionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        version = create_version(**serializer.validated_data)
        return Response(
            self.get_serializer(version).data,
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, pk: str) -> Response:
        """Update name and/or description of a version."""
        version = get_version(int(pk))
        serializer = UpdateVersionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        version = update_version(
            version.id,
            name=serializer.validated_data.get('name', version.name),
            description=serializer.validated_data.get(
                'description',
                version.description,
            ),
        )
        return Response(self.get_serializer(version).data)

    def destroy(self, request: Request, pk: str) -> Response:
        """Delete a version; attached files are kept."""
        delete_version(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='attach-file')
    def attach(self, request: Request, pk: str) -> Response:
        """Attach an existing file to the version."""
        serializer = AttachFileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        attach_file(int(pk), serializer.validated_data['file_id'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='detach-file')
    def detach(self, request: Request, pk: str) -> Response:
        """Detach a file from the version."""
        serializer = AttachFileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        detach_file(int(pk), serializer.validated_data['file_id'])
        return Response(status=status.HTTP_204_NO_CONTENT)
