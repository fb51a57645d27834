"""
API error rendering.

Every error leaves the API as {"success": false, "error": <message>} with an
optional "details" entry. Configured as REST_FRAMEWORK['EXCEPTION_HANDLER'].
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from flock_management.services.exceptions import BatchValidationError, ConflictError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        exc = BatchValidationError('Invalid data', details=details)
    elif isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error in {_view_name(context)}: {exc}")
        exc = ConflictError('A record with these values already exists')

    response = exception_handler(exc, context)

    if response is None:
        logger.error(f"Unhandled error in {_view_name(context)}: {exc}", exc_info=exc)
        return Response(
            {'success': False, 'error': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload = {'success': False}
    data = response.data
    if isinstance(data, dict) and 'detail' in data:
        payload['error'] = str(data['detail'])
    else:
        # DRF serializer errors: field -> messages
        payload['error'] = 'Invalid request'
        payload['details'] = data

    details = getattr(exc, 'details', None)
    if details is not None:
        payload['details'] = details

    response.data = payload
    return response


def _view_name(context):
    view = context.get('view')
    return view.__class__.__name__ if view is not None else 'unknown view'
