# services/academy-service/src/apps/core/api/views/base.py
"""
Base Views and Mixins

Common functionality for Academy Service API views.
"""

from uuid import UUID

from rest_framework.response import Response

from ...services.exceptions import AcademyValidationError


class StudentContextMixin:
    """
    Mixin for extracting the acting student from the request.

    The student id comes from the ``student_id`` claim of the identity
    token and is passed explicitly into every service call.
    """

    def get_student_id(self) -> UUID:
        """
        Extract student ID from request.

        Raises:
            AcademyValidationError: If the token carries no valid student id
        """
        student_id = getattr(self.request.user, 'student_id', None)

        if not student_id:
            raise AcademyValidationError(
                message="Student ID is required",
                field="student_id"
            )

        try:
            return UUID(str(student_id))
        except ValueError:
            raise AcademyValidationError(
                message="Invalid student ID format",
                field="student_id"
            )


def success_response(data=None, status=None, **extra) -> Response:
    """Wrap a payload in the standard success envelope."""
    body = {'success': True}
    if data is not None:
        body['data'] = data
    body.update(extra)
    return Response(body, status=status)
