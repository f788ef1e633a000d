"""REST endpoints for files.

Views only parse input and serialize output; every state change goes
through ``logic.file_operations``. Domain errors are rendered by
``server.exception_handler``.
"""

import logging

from django.http import FileResponse, HttpResponse, StreamingHttpResponse
from django.http.response import HttpResponseBase
from django.utils.http import content_disposition_header
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response

from server.apps.files.infrastructure.factory import get_storage
from server.apps.files.logic.file_operations import (
    create_file,
    delete_file,
    download_file,
    get_file,
    list_files,
    upload_file,
)
from server.apps.files.ranges import (
    RangeNotSatisfiableError,
    RangeStream,
    parse_range,
)
from server.apps.files.serializers import (
    CreateFileSerializer,
    FileListQuerySerializer,
    FileSerializer,
    UploadFileSerializer,
)

logger = logging.getLogger(__name__)

_DEFAULT_CONTENT_TYPE = 'application/octet-stream'


class FileViewSet(viewsets.GenericViewSet):
    """File metadata CRUD plus content upload and download.

    - ``POST /files/`` creates a placeholder (``{"name": ...}``)
    - ``POST /files/{id}/upload/`` stores content (multipart ``file``)
    - ``GET /files/{id}/download/`` streams content back
    """

    serializer_class = FileSerializer
    lookup_value_regex = r'\d+'

    def list(self, request: Request) -> Response:
        """List files, optionally filtered by ``version_id``."""
        query = FileListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        files = list_files(query.validated_data.get('version_id'))
        page = self.paginate_queryset(files)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str) -> Response:
        """Get one file's metadata."""
        file_instance = get_file(int(pk))
        return Response(self.get_serializer(file_instance).data)

    def create(self, request: Request) -> Response:
        """Create a metadata-only file."""
        serializer = CreateFileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        file_instance = create_file(serializer.validated_data['name'])
        return Response(
            self.get_serializer(file_instance).data,
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request: Request, pk: str) -> Response:
        """Delete a file and its stored content."""
        delete_file(get_storage(), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser])
    def upload(self, request: Request, pk: str) -> Response:
        """Upload content for a metadata-only file."""
        serializer = UploadFileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        uploaded = serializer.validated_data['file']
        try:
            file_instance = upload_file(
                get_storage(),
                int(pk),
                uploaded,
                serializer.validated_data.get('size'),
            )
        finally:
            uploaded.close()

        return Response(
            self.get_serializer(file_instance).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['get'])
    def download(self, request: Request, pk: str) -> HttpResponseBase:
        """Stream stored content as an attachment.

        A single ``Range: bytes=...`` request is answered with 206 and
        only the requested bytes; a range outside the content gets 416.
        """
        file_instance, stream = download_file(get_storage(), int(pk))
        content_type = file_instance.mime_type or _DEFAULT_CONTENT_TYPE

        try:
            byte_range = parse_range(
                request.META.get('HTTP_RANGE'),
                file_instance.size,
            )
        except RangeNotSatisfiableError as error:
            stream.close()
            response = HttpResponse(
                status=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            )
            response['Content-Range'] = f'bytes */{error.size}'
            return response

        if byte_range is None:
            response = FileResponse(
                stream,
                as_attachment=True,
                filename=file_instance.name,
                content_type=content_type,
            )
            response['Content-Length'] = str(file_instance.size)
        else:
            response = StreamingHttpResponse(
                RangeStream(stream, byte_range),
                status=status.HTTP_206_PARTIAL_CONTENT,
                content_type=content_type,
            )
            response['Content-Range'] = byte_range.content_range
            response['Content-Length'] = str(byte_range.length)
            response['Content-Disposition'] = content_disposition_header(
                as_attachment=True,
                filename=file_instance.name,
            )

        response['Accept-Ranges'] = 'bytes'
        return response
