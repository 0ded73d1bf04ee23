# services/academy-service/src/apps/core/services/attempt_service.py
"""
Exam Attempt Service

Business logic for grading exam submissions and reading attempt history.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Optional

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from ..models import Exam, ExamAttempt, OPTIONS_PER_QUESTION
from .eligibility_service import ExamEligibilityService, EligibilityReason
from .exceptions import (
    ExamNotFoundError,
    AttemptNotFoundError,
    ExamNotEligibleError,
    InvalidAnswersError,
    InvalidOptionIndexError,
)

logger = logging.getLogger(__name__)


def calculate_percentage(score: int, total: int) -> int:
    """Integer percentage of score over total, rounding half up."""
    if total <= 0:
        return 0
    value = Decimal(score) * 100 / Decimal(total)
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class ExamAttemptService:
    """Service for submitting and reviewing exam attempts."""

    # =========================================================================
    # VALIDATION
    # =========================================================================

    @staticmethod
    def validate_answers(answers: Any) -> Dict[str, Optional[int]]:
        """
        Validate a submitted answers map.

        Keys are question ids. Values are option indexes 0..3 or None for
        an unanswered question.

        Raises:
            InvalidAnswersError: If answers is not a mapping
            InvalidOptionIndexError: If a value is not an integer within range
        """
        if not isinstance(answers, dict):
            raise InvalidAnswersError()

        cleaned = {}
        for question_id, value in answers.items():
            field = f"answers.{question_id}"
            if value is None:
                cleaned[str(question_id)] = None
                continue
            # bool is a subclass of int
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidOptionIndexError(value, field=field)
            if not 0 <= value < OPTIONS_PER_QUESTION:
                raise InvalidOptionIndexError(value, field=field)
            cleaned[str(question_id)] = value

        return cleaned

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def submit_attempt(
        student_id: str,
        exam_id: str,
        answers: Dict[str, Any],
    ) -> ExamAttempt:
        """
        Grade a submission and persist it as a new attempt.

        Questions and correct indexes are always loaded server-side.
        Unanswered questions count as incorrect.

        Args:
            student_id: Student ID
            exam_id: Exam ID
            answers: Map of question id to selected option index

        Returns:
            Created attempt
        """
        answers = ExamAttemptService.validate_answers(answers)

        try:
            exam = Exam.objects.get(id=exam_id)
        except Exam.DoesNotExist:
            raise ExamNotFoundError(exam_id)

        questions = list(exam.questions.all())
        if not questions:
            raise ExamNotEligibleError(EligibilityReason.NO_QUESTIONS)

        score = 0
        recorded_answers = {}
        question_results = {}

        for question in questions:
            key = str(question.id)
            selected = answers.get(key)
            is_correct = selected is not None and selected == question.correct_option_index

            if is_correct:
                score += 1

            recorded_answers[key] = selected
            question_results[key] = {
                'correct': is_correct,
                'correct_index': question.correct_option_index,
                'selected_index': selected,
            }

        total = len(questions)
        percentage = calculate_percentage(score, total)
        passing_percentage = exam.passing_percentage

        attempt = ExamAttempt.objects.create(
            student_id=student_id,
            exam=exam,
            score=score,
            total_questions=total,
            percentage=percentage,
            passed=percentage >= passing_percentage,
            passing_percentage=passing_percentage,
            answers=recorded_answers,
            question_results=question_results,
            completed_at=timezone.now(),
        )

        logger.info(
            f"Exam attempt {attempt.id} graded: {score}/{total} ({percentage}%)",
            extra={
                'student_id': str(student_id),
                'exam_id': str(exam.id),
                'passed': attempt.passed,
            }
        )

        from ..events.publishers import publish_exam_submitted
        publish_exam_submitted(
            attempt_id=str(attempt.id),
            student_id=str(student_id),
            exam_id=str(exam.id),
            course_id=str(exam.course_id),
            percentage=percentage,
            passed=attempt.passed,
        )

        return attempt

    @staticmethod
    def submit_for_course(
        student_id: str,
        course_id: str,
        answers: Any,
    ) -> ExamAttempt:
        """
        Submit the final exam of a course after passing the eligibility gate.

        Raises:
            InvalidAnswersError / InvalidOptionIndexError: Malformed answers
            ExamNotEligibleError: Student may not take the exam
        """
        answers = ExamAttemptService.validate_answers(answers)

        eligibility = ExamEligibilityService.check_eligibility(student_id, course_id)
        if not eligibility['eligible']:
            details = {}
            if 'progress' in eligibility:
                details['progress'] = eligibility['progress']
            raise ExamNotEligibleError(eligibility['reason'], details=details)

        return ExamAttemptService.submit_attempt(
            student_id=student_id,
            exam_id=eligibility['exam']['id'],
            answers=answers,
        )

    # =========================================================================
    # HISTORY
    # =========================================================================

    @staticmethod
    def get_attempts(student_id: str, course_id: str) -> Dict[str, Any]:
        """
        Get attempt history of a student on a course exam, newest first.

        Returns:
            Dict with attempts, the exam's current passing percentage and
            the best score
        """
        exam = Exam.objects.filter(course_id=course_id).first()
        if exam is None:
            raise ExamNotFoundError(resource="Course exam", exam_id=course_id)

        attempts = list(
            ExamAttempt.objects.filter(student_id=student_id, exam=exam).order_by('-created_at')
        )

        return {
            'attempts': attempts,
            'passing_percentage': exam.passing_percentage,
            'best_score': max((a.percentage for a in attempts), default=0),
        }

    @staticmethod
    def get_attempt(student_id: str, attempt_id: str) -> ExamAttempt:
        """Get one attempt owned by the student."""
        try:
            return ExamAttempt.objects.select_related('exam').get(
                id=attempt_id,
                student_id=student_id
            )
        except ExamAttempt.DoesNotExist:
            raise AttemptNotFoundError(attempt_id)

    @staticmethod
    def get_best_score(student_id: str, exam_id: str) -> int:
        """Best percentage over all attempts of a student on an exam."""
        best = ExamAttempt.objects.filter(
            student_id=student_id,
            exam_id=exam_id
        ).aggregate(best=Max('percentage'))['best']
        return best or 0

