# services/academy-service/src/apps/core/api/views/course_views.py
"""
Course Views

Progress and final-exam endpoints of a course, addressed by slug.
"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action

from shared.common.permissions import HasActiveSubscription

from ...services import ProgressService, ExamEligibilityService, ExamAttemptService
from ..serializers import (
    ExamSubmitSerializer,
    ExamAttemptListSerializer,
    ExamAttemptResultSerializer,
    ProgressUpdateSerializer,
    ChapterProgressSerializer,
)
from .base import StudentContextMixin, success_response


class CourseViewSet(StudentContextMixin, viewsets.ViewSet):
    """
    ViewSet for a student's progress and exam on a course.
    """

    permission_classes = [HasActiveSubscription]
    lookup_field = 'slug'

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=['get'])
    def exam(self, request, slug=None):
        """Check exam eligibility and return the exam without its answer key."""
        course = ProgressService.get_published_course(slug)
        result = ExamEligibilityService.check_eligibility(
            student_id=self.get_student_id(),
            course_id=course.id,
        )
        return success_response(course=course.get_summary(), **result)

    @extend_schema(request=ExamSubmitSerializer, responses={201: ExamAttemptResultSerializer})
    @action(detail=True, methods=['post'], url_path='exam/submit')
    def submit_exam(self, request, slug=None):
        """Grade an exam submission."""
        serializer = ExamSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        course = ProgressService.get_published_course(slug)
        attempt = ExamAttemptService.submit_for_course(
            student_id=self.get_student_id(),
            course_id=course.id,
            answers=serializer.validated_data['answers'],
        )

        return success_response(
            ExamAttemptResultSerializer(attempt).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(responses={200: ExamAttemptListSerializer(many=True)})
    @action(detail=True, methods=['get'], url_path='exam/attempts')
    def exam_attempts(self, request, slug=None):
        """List the student's attempts on the course exam, newest first."""
        course = ProgressService.get_published_course(slug)
        history = ExamAttemptService.get_attempts(
            student_id=self.get_student_id(),
            course_id=course.id,
        )

        return success_response(
            ExamAttemptListSerializer(history['attempts'], many=True).data,
            passing_percentage=history['passing_percentage'],
            best_score=history['best_score'],
        )

    @extend_schema(request=ProgressUpdateSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=['get', 'post'])
    def progress(self, request, slug=None):
        """Get course progress, or record progress on one of its chapters."""
        course = ProgressService.get_published_course(slug)
        student_id = self.get_student_id()

        if request.method == 'GET':
            return success_response(
                ProgressService.get_course_progress(student_id, course.id)
            )

        serializer = ProgressUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        progress = ProgressService.record_progress(
            student_id=student_id,
            chapter_id=data['chapter_id'],
            progress_percent=data.get('progress_percent'),
            last_position_seconds=data.get('last_position_seconds'),
            completed=data.get('completed'),
            course_id=course.id,
        )

        return success_response(
            ChapterProgressSerializer(progress).data,
            course_completed=ProgressService.is_course_complete(student_id, course.id),
        )
