"""Pagination shared by every list endpoint."""

from typing import Final

from rest_framework import pagination

_DEFAULT_LIMIT: Final = 100
_MAX_LIMIT: Final = 100


class LimitOffsetPagination(pagination.LimitOffsetPagination):
    """Limit/offset pagination capped at 100 items per page."""

    default_limit = _DEFAULT_LIMIT
    max_limit = _MAX_LIMIT
