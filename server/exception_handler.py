"""Translation of domain errors into HTTP responses.

Logic and storage code raise typed exceptions and never deal with
status codes; this handler is the single place mapping them.
"""

import logging
from typing import Any, Final

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from server.apps.files.exceptions import (
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
    StorageError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: Final = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PreconditionFailedError, status.HTTP_400_BAD_REQUEST),
)


def domain_exception_handler(
    exc: Exception,
    context: dict[str, Any],
) -> Response | None:
    """Render domain errors, delegating everything else to DRF.

    Args:
        exc: Exception raised by the view.
        context: DRF handler context (view, request, ...).

    Returns:
        Error response, or None to let Django produce a 500.
    """
    for error_class, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return Response({'detail': str(exc)}, status=status_code)

    if isinstance(exc, StorageError):
        logger.error('Storage failure while handling request: %s', exc)
        return Response(
            {'detail': 'Storage operation failed'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return exception_handler(exc, context)
