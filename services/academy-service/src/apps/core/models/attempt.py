# services/academy-service/src/apps/core/models/attempt.py
"""
Exam Attempt Models

Immutable record of a graded exam submission.
"""

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin

from .exam import Exam


class ExamAttempt(UUIDPrimaryKeyMixin):
    """
    Graded exam attempt.

    Attempts are written once and never updated. The passing percentage
    in force at grading time is stored with the attempt so later changes
    to the exam do not alter historical results.
    """

    student_id = models.UUIDField(db_index=True)
    exam = models.ForeignKey(
        Exam,
        on_delete=models.PROTECT,
        related_name='attempts'
    )

    # Scoring
    score = models.PositiveIntegerField(default=0)
    total_questions = models.PositiveIntegerField(default=0)
    percentage = models.PositiveSmallIntegerField(default=0)
    passed = models.BooleanField(default=False)
    passing_percentage = models.PositiveSmallIntegerField()

    # Answers
    answers = models.JSONField(default=dict)
    # Example: {"question_id": 2, "other_question_id": null}

    question_results = models.JSONField(default=dict)
    # Example:
    # {
    #   "question_id": {"correct": true, "correct_index": 2, "selected_index": 2}
    # }

    completed_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'exam_attempts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['student_id', 'exam']),
        ]

    def __str__(self):
        return f"{self.student_id} - {self.exam_id}: {self.percentage}%"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Exam attempts cannot be modified once recorded")
        super().save(*args, **kwargs)
