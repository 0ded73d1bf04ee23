# shared/common/exceptions.py
"""
Exception Handler

Formats every API error as
``{'success': False, 'error': {'code', 'message', 'details', 'request_id'}}``.
"""

import logging
import traceback
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import APIException, ValidationError
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from django.conf import settings

logger = logging.getLogger(__name__)


def error_body(
    code: str,
    message: str,
    request_id: str = None,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Build the standard error envelope"""
    error = {
        'code': code,
        'message': message,
        'request_id': request_id,
    }
    if details:
        error['details'] = details
    return {'success': False, 'error': error}


def is_service_error(exc) -> bool:
    """
    Service-layer errors carry ``code``, ``message`` and an HTTP
    ``status_code`` and are rendered as-is.
    """
    if isinstance(exc, APIException):
        return False
    return all(hasattr(exc, attr) for attr in ('code', 'message', 'status_code'))


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    Custom exception handler for DRF.
    Provides consistent error response format across all services.
    """

    # Get the request ID for tracing
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    # Service-layer errors
    if is_service_error(exc):
        log_method = logger.warning if exc.status_code >= 500 else logger.info
        log_method(
            f"Service error: {exc.code} - {exc.message}",
            extra={'request_id': request_id, 'error_code': exc.code}
        )
        return Response(
            error_body(exc.code, exc.message, request_id, getattr(exc, 'details', None)),
            status=exc.status_code
        )

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    # If DRF handled it, format the response
    if response is not None:
        return format_error_response(exc, response, request_id)

    # Handle Django ValidationError
    if isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return Response(
            error_body('VALIDATION_ERROR', 'Validation error', request_id, errors),
            status=status.HTTP_400_BAD_REQUEST
        )

    # Handle Http404
    if isinstance(exc, Http404):
        return Response(
            error_body('NOT_FOUND', str(exc) or 'Resource not found', request_id),
            status=status.HTTP_404_NOT_FOUND
        )

    # Persistence failures are reported without internal detail
    if isinstance(exc, DatabaseError):
        logger.error(
            f"Database error: {exc}",
            extra={'request_id': request_id, 'exception_type': type(exc).__name__}
        )
        return Response(
            error_body('SERVICE_UNAVAILABLE', 'The service is temporarily unavailable.', request_id),
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    # Log unexpected exceptions
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            'request_id': request_id,
            'exception_type': type(exc).__name__,
        }
    )

    # Return generic error in production, detailed in debug
    if settings.DEBUG:
        body = error_body('INTERNAL_ERROR', str(exc), request_id)
        body['error']['type'] = type(exc).__name__
        body['error']['traceback'] = traceback.format_exc().split('\n')
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(
        error_body('INTERNAL_ERROR', 'An unexpected error occurred. Please try again later.', request_id),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def format_error_response(exc, response: Response, request_id: str = None) -> Response:
    """Format a DRF error response in the standard structure"""

    if isinstance(exc, ValidationError):
        error_code = 'VALIDATION_ERROR'
    else:
        error_code = getattr(exc, 'default_code', 'error').upper()
    details = None

    # Field-level validation errors from DRF
    if isinstance(response.data, dict) and 'detail' not in response.data:
        details = response.data
    elif isinstance(response.data, list):
        details = {'non_field_errors': response.data}

    response.data = error_body(error_code, get_error_message(exc, response), request_id, details)
    return response


def get_error_message(exc, response: Response) -> str:
    """Extract error message from exception or response"""

    if hasattr(exc, 'detail'):
        if isinstance(exc.detail, str):
            return exc.detail
        if isinstance(exc.detail, list) and exc.detail:
            return str(exc.detail[0])
        if isinstance(exc.detail, dict):
            return str(exc.detail.get('detail', 'Validation error'))

    if isinstance(response.data, dict):
        return str(response.data.get('detail', response.data))

    return str(response.data)
