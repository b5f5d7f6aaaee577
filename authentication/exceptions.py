# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    400: 'Validation error',
    401: 'Authentication required',
    403: 'Permission denied',
    404: 'Resource not found',
    405: 'Method not allowed',
    409: 'Conflict',
    500: 'Internal server error',
}


def _message_from(data, default):
    if isinstance(data, dict) and isinstance(data.get('detail'), str):
        return data['detail']
    return default


def custom_exception_handler(exc, context):
    """
    Render every API error as ``{"error": <message>, "details": ..., "status_code": ...}``
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        default = STATUS_MESSAGES.get(response.status_code, 'An error occurred')
        response.data = {
            'error': _message_from(response.data, default),
            'details': response.data,
            'status_code': response.status_code,
        }

    # Handle Django ValidationError
    elif isinstance(exc, ValidationError):
        logger.warning("Validation Error: %s", exc)
        response = Response({
            'error': 'Validation error',
            'details': {'non_field_errors': exc.messages},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Handle Django IntegrityError
    elif isinstance(exc, IntegrityError):
        logger.error("Integrity Error: %s", exc)
        response = Response({
            'error': 'Database integrity error',
            'details': {'error': 'This operation violates database constraints'},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Storage failures
    elif isinstance(exc, DatabaseError):
        logger.exception("Storage Error: %s", exc)
        response = Response({
            'error': 'Storage error',
            'details': {'error': str(exc)} if settings.DEBUG else {},
            'status_code': 500
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Handle unexpected errors
    else:
        logger.exception("Unexpected Error: %s", exc)
        response = Response({
            'error': 'An unexpected error occurred',
            'details': {'error': str(exc)} if settings.DEBUG else {},
            'status_code': 500
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return response
