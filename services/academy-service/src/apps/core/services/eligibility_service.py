# services/academy-service/src/apps/core/services/eligibility_service.py
"""
Exam Eligibility Service

Decides whether a student may take the final exam of a course.
"""

import logging
from typing import Dict, Any

from django.db import DatabaseError
from django.db.models import Max

from ..models import Exam, ExamAttempt
from .progress_service import ProgressService

logger = logging.getLogger(__name__)


class EligibilityReason:
    """Reasons reported when a student is not eligible."""
    INCOMPLETE_COURSE = 'incomplete_course'
    NO_EXAM = 'no_exam'
    EXAM_DISABLED = 'exam_disabled'
    NO_QUESTIONS = 'no_questions'
    ERROR = 'error'


class ExamEligibilityService:
    """
    Exam eligibility gate.

    Checks run in order: course completion, exam existence, exam enabled,
    questions present. The first failing check decides the reason. Any
    database failure is reported as ``error`` and never as eligible.
    """

    @staticmethod
    def check_eligibility(student_id: str, course_id: str) -> Dict[str, Any]:
        """
        Check exam eligibility for a student.

        Args:
            student_id: Student ID
            course_id: Course ID

        Returns:
            Eligibility result. Eligible results carry the exam payload
            (without the answer key) and the student's attempt stats.
        """
        try:
            return ExamEligibilityService._evaluate(student_id, course_id)
        except DatabaseError as e:
            logger.error(
                f"Error checking exam eligibility: {e}",
                extra={'student_id': str(student_id), 'course_id': str(course_id)}
            )
            return {
                'eligible': False,
                'reason': EligibilityReason.ERROR,
                'message': 'Could not verify exam eligibility',
            }

    @staticmethod
    def _evaluate(student_id: str, course_id: str) -> Dict[str, Any]:
        if not ProgressService.is_course_complete(student_id, course_id):
            progress = ProgressService.get_course_progress(student_id, course_id)
            return {
                'eligible': False,
                'reason': EligibilityReason.INCOMPLETE_COURSE,
                'progress': {
                    'completed': progress['completed'],
                    'total': progress['total'],
                    'percentage': progress['percentage'],
                },
            }

        exam = Exam.objects.filter(course_id=course_id).first()
        if exam is None:
            return {
                'eligible': False,
                'reason': EligibilityReason.NO_EXAM,
                'message': 'This course has no exam configured',
            }

        if not exam.is_enabled:
            return {
                'eligible': False,
                'reason': EligibilityReason.EXAM_DISABLED,
                'message': 'The exam is not currently available',
            }

        payload = exam.get_public_payload()
        if not payload['questions']:
            return {
                'eligible': False,
                'reason': EligibilityReason.NO_QUESTIONS,
                'message': 'The exam has no questions',
            }

        return {
            'eligible': True,
            'exam': payload,
            'stats': ExamEligibilityService.get_attempt_stats(student_id, exam),
        }

    @staticmethod
    def get_attempt_stats(student_id: str, exam: Exam) -> Dict[str, Any]:
        """
        Prior-attempt stats of a student on an exam.

        Best score is the highest percentage over all attempts, not the latest.
        """
        attempts = ExamAttempt.objects.filter(student_id=student_id, exam=exam)
        passed_attempt = attempts.filter(passed=True).order_by('created_at').first()

        return {
            'total_attempts': attempts.count(),
            'best_score': attempts.aggregate(best=Max('percentage'))['best'] or 0,
            'passed': passed_attempt is not None,
            'passed_attempt_id': str(passed_attempt.id) if passed_attempt else None,
        }
