# shared/common/permissions.py
"""
Permission Classes for Student, Subscription and Service Access
"""

import logging
from typing import List, Optional
from django.conf import settings
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

logger = logging.getLogger(__name__)

ADMIN_ROLES = ('admin', 'superadmin')


def get_claim(request: Request, name: str, default=None):
    """Read a token claim from the request user, falling back to the raw claims."""
    value = getattr(request.user, name, None)
    if value is not None:
        return value
    if isinstance(getattr(request, 'auth', None), dict):
        return request.auth.get(name, default)
    return default


class IsServiceRequest(permissions.BasePermission):
    """Allow only callers authenticated with the service token"""

    def has_permission(self, request: Request, view: APIView) -> bool:
        return bool(getattr(request.user, 'is_service', False))


class IsStudent(permissions.BasePermission):
    """Authenticated user whose token names a student profile"""

    message = 'A student profile is required.'

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not getattr(request.user, 'is_authenticated', False):
            return False
        return bool(get_claim(request, 'student_id'))

    @staticmethod
    def is_admin(request: Request) -> bool:
        roles: List[str] = get_claim(request, 'roles', []) or []
        return bool(set(roles) & set(ADMIN_ROLES))


class HasActiveSubscription(IsStudent):
    """
    Student with a subscription in one of ACTIVE_SUBSCRIPTION_STATUSES.
    Administrators always pass.
    """

    message = 'An active subscription is required.'

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not super().has_permission(request, view):
            return False

        if self.is_admin(request):
            return True

        subscription_status: Optional[str] = get_claim(request, 'subscription_status')
        if subscription_status in getattr(settings, 'ACTIVE_SUBSCRIPTION_STATUSES', ['active']):
            return True

        logger.info(
            "Denied request without active subscription",
            extra={'user_id': str(getattr(request.user, 'id', None)), 'subscription_status': subscription_status}
        )
        return False
