"""
Service-layer errors for the flock batch engine.

Views let these propagate; core.exceptions.api_exception_handler renders them.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class FlockServiceError(APIException):
    """Base class for errors raised by flock_management services."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'internal_error'

    def __init__(self, detail=None, details=None):
        super().__init__(detail)
        self.details = details


class BatchValidationError(FlockServiceError):
    """Malformed or out-of-range input, or a violated count invariant."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'validation_error'


class NotFoundOrDenied(FlockServiceError):
    """
    Resource is absent or owned by someone else.

    Both cases answer 404 so callers cannot probe for other users' rows.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found or access denied'
    default_code = 'not_found'


class ConflictError(FlockServiceError):
    """Uniqueness violation or a concurrent modification of the same batch."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict'
    default_code = 'conflict'
