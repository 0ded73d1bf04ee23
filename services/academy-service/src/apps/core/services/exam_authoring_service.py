# services/academy-service/src/apps/core/services/exam_authoring_service.py
"""
Exam Authoring Service

Keeps course exams consistent while they are edited: one exam per course,
four options per question and no enabled exam without questions.
"""

import logging
from typing import List, Any

from django.db import transaction
from django.db.models import Max

from ..models import (
    Course,
    Exam,
    ExamQuestion,
    OPTIONS_PER_QUESTION,
    DEFAULT_PASSING_PERCENTAGE,
)
from .exceptions import (
    AcademyValidationError,
    CourseNotFoundError,
    ExamAlreadyExistsError,
    ExamHasNoQuestionsError,
    ExamNotFoundError,
    InvalidOptionIndexError,
    MissingRequiredFieldError,
)

logger = logging.getLogger(__name__)

MIN_QUESTION_TEXT_LENGTH = 5


class ExamAuthoringService:
    """Service for creating exams and editing their questions."""

    # =========================================================================
    # EXAMS
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def create_exam(
        course_id: str,
        title: str,
        description: str = '',
        passing_percentage: int = DEFAULT_PASSING_PERCENTAGE,
    ) -> Exam:
        """
        Create the final exam of a course.

        Exams start disabled; the passing percentage is clamped to 0..100.
        """
        if not title or not title.strip():
            raise MissingRequiredFieldError('title')

        try:
            course = Course.objects.get(id=course_id)
        except Course.DoesNotExist:
            raise CourseNotFoundError(course_id)

        if Exam.objects.filter(course=course).exists():
            raise ExamAlreadyExistsError(course.id)

        if passing_percentage is None:
            passing_percentage = DEFAULT_PASSING_PERCENTAGE

        exam = Exam.objects.create(
            course=course,
            title=title.strip(),
            description=description or '',
            passing_percentage=max(0, min(100, int(passing_percentage))),
            is_enabled=False,
        )

        logger.info(f"Created exam {exam.id} for course {course.id}")

        return exam

    @staticmethod
    @transaction.atomic
    def set_enabled(exam_id: str, enabled: bool) -> Exam:
        """
        Enable or disable an exam.

        Raises:
            ExamHasNoQuestionsError: When enabling an exam without questions
        """
        exam = ExamAuthoringService._lock_exam(exam_id)

        if enabled and not exam.questions.exists():
            raise ExamHasNoQuestionsError(exam.id)

        exam.is_enabled = bool(enabled)
        exam.save(update_fields=['is_enabled', 'updated_at'])

        logger.info(f"Exam {exam.id} {'enabled' if enabled else 'disabled'}")

        return exam

    @staticmethod
    def _lock_exam(exam_id: str) -> Exam:
        try:
            return Exam.objects.select_for_update().get(id=exam_id)
        except Exam.DoesNotExist:
            raise ExamNotFoundError(exam_id)

    # =========================================================================
    # QUESTIONS
    # =========================================================================

    @staticmethod
    def validate_question(question_text: str, options: List[Any], correct_option_index: Any) -> List[dict]:
        """
        Validate a question and normalize its options to ``[{"text": ...}]``.
        """
        if not question_text or len(question_text.strip()) < MIN_QUESTION_TEXT_LENGTH:
            raise MissingRequiredFieldError(
                'question_text',
                f"Question text must be at least {MIN_QUESTION_TEXT_LENGTH} characters"
            )

        if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
            raise AcademyValidationError(
                f"A question needs exactly {OPTIONS_PER_QUESTION} options",
                field="options"
            )

        normalized = []
        for position, option in enumerate(options):
            text = option.get('text') if isinstance(option, dict) else option
            if not isinstance(text, str) or not text.strip():
                raise MissingRequiredFieldError(
                    f"options.{position}",
                    f"Option {position + 1} needs text"
                )
            normalized.append({'text': text.strip()})

        if (
            isinstance(correct_option_index, bool)
            or not isinstance(correct_option_index, int)
            or not 0 <= correct_option_index < OPTIONS_PER_QUESTION
        ):
            raise InvalidOptionIndexError(correct_option_index, field="correct_option_index")

        return normalized

    @staticmethod
    @transaction.atomic
    def add_question(
        exam_id: str,
        question_text: str,
        options: List[Any],
        correct_option_index: int,
    ) -> ExamQuestion:
        """Append a question to an exam."""
        exam = ExamAuthoringService._lock_exam(exam_id)
        normalized = ExamAuthoringService.validate_question(
            question_text, options, correct_option_index
        )

        last_order = exam.questions.aggregate(last=Max('sort_order'))['last']

        question = ExamQuestion.objects.create(
            exam=exam,
            question_text=question_text.strip(),
            options=normalized,
            correct_option_index=correct_option_index,
            sort_order=0 if last_order is None else last_order + 1,
        )

        logger.info(f"Added question {question.id} to exam {exam.id}")

        return question

    @staticmethod
    @transaction.atomic
    def remove_question(question_id: str) -> Exam:
        """
        Delete a question. Removing the last question disables the exam.

        Returns:
            The exam the question belonged to
        """
        try:
            question = ExamQuestion.objects.get(id=question_id)
        except ExamQuestion.DoesNotExist:
            raise ExamNotFoundError(question_id, resource="Exam question")

        exam = ExamAuthoringService._lock_exam(question.exam_id)
        question.delete()

        if exam.is_enabled and not exam.questions.exists():
            exam.is_enabled = False
            exam.save(update_fields=['is_enabled', 'updated_at'])
            logger.info(f"Exam {exam.id} disabled after its last question was removed")

        return exam
