# services/academy-service/src/apps/core/models/exam.py
"""
Exam Models

Final exam of a course and its multiple-choice questions.
"""

from typing import Dict, Any, List

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin

from .course import Course


OPTIONS_PER_QUESTION = 4
DEFAULT_PASSING_PERCENTAGE = 70


class Exam(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Final exam of a course.

    An exam can only be enabled while it has at least one question.
    """

    course = models.OneToOneField(
        Course,
        on_delete=models.CASCADE,
        related_name='exam'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    passing_percentage = models.PositiveSmallIntegerField(
        default=DEFAULT_PASSING_PERCENTAGE,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    is_enabled = models.BooleanField(default=False)

    class Meta:
        db_table = 'course_exams'

    def __str__(self):
        return f"{self.course.title} - {self.title}"

    @property
    def question_count(self) -> int:
        return self.questions.count()

    def get_public_payload(self) -> Dict[str, Any]:
        """Exam as shown to a student, without the answer key."""
        questions = [q.get_public_payload() for q in self.questions.all()]
        return {
            'id': str(self.id),
            'title': self.title,
            'description': self.description,
            'passing_percentage': self.passing_percentage,
            'questions_count': len(questions),
            'questions': questions,
        }


class ExamQuestion(UUIDPrimaryKeyMixin, TimestampMixin):
    """Multiple-choice question with exactly four options."""

    exam = models.ForeignKey(
        Exam,
        on_delete=models.CASCADE,
        related_name='questions'
    )
    question_text = models.TextField()
    options = models.JSONField(default=list)
    # Example: [{"text": "Paris"}, {"text": "Rome"}, {"text": "Lima"}, {"text": "Oslo"}]
    correct_option_index = models.PositiveSmallIntegerField(
        validators=[MaxValueValidator(OPTIONS_PER_QUESTION - 1)]
    )
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'exam_questions'
        ordering = ['exam', 'sort_order', 'created_at']

    def __str__(self):
        return self.question_text[:50]

    def get_option_texts(self) -> List[str]:
        return [
            option.get('text', '') if isinstance(option, dict) else str(option)
            for option in self.options
        ]

    def get_public_payload(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'question_text': self.question_text,
            'options': [{'text': text} for text in self.get_option_texts()],
            'sort_order': self.sort_order,
        }
