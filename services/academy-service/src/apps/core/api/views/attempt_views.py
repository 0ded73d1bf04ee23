# services/academy-service/src/apps/core/api/views/attempt_views.py
"""
Exam Attempt Views
"""

from rest_framework import viewsets

from shared.common.permissions import IsStudent

from ...services import ExamAttemptService
from ..serializers import ExamAttemptResultSerializer
from .base import StudentContextMixin, success_response


class ExamAttemptViewSet(StudentContextMixin, viewsets.ViewSet):
    """
    Read-only access to a student's own graded attempts.
    """

    permission_classes = [IsStudent]

    def retrieve(self, request, pk=None):
        """Get an attempt with its per-question breakdown."""
        attempt = ExamAttemptService.get_attempt(
            student_id=self.get_student_id(),
            attempt_id=pk,
        )
        return success_response(ExamAttemptResultSerializer(attempt).data)
