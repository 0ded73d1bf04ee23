# shared/common/middleware.py
"""
Request Tracing Middleware
"""

import uuid
import time
import logging
from typing import Callable
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

UNLOGGED_PATHS = ('/health/', '/ready/')


class RequestIDMiddleware:
    """
    Middleware that adds a unique request ID to each request.
    The ID is used for request tracing across services.
    """

    header_name = 'X-Request-ID'

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Reuse the caller's request ID when present
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.request_id = request_id

        response = self.get_response(request)
        response[self.header_name] = request_id

        return response


class LoggingMiddleware:
    """
    Middleware that logs one record per completed request with its
    status code and duration.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.path in UNLOGGED_PATHS:
            return self.get_response(request)

        start_time = time.monotonic()
        response = self.get_response(request)
        duration_ms = round((time.monotonic() - start_time) * 1000, 2)

        log_method = logger.warning if response.status_code >= 400 else logger.info
        log_method(
            f"{request.method} {request.path} - {response.status_code}",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
                'ip_address': get_client_ip(request),
            }
        )

        response['X-Response-Time'] = f"{duration_ms:.2f}ms"

        return response


def get_client_ip(request: HttpRequest) -> str:
    """Extract client IP from request"""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')
