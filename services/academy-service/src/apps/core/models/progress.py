# services/academy-service/src/apps/core/models/progress.py
"""
Progress Models

Per-chapter progress of a student through a course.
"""

from django.db import models
from django.utils import timezone

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin

from .course import Course, Chapter


class ChapterProgress(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Progress of one student on one chapter.

    A completed chapter always reports 100 percent.
    """

    student_id = models.UUIDField(db_index=True)
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='progress_records'
    )
    chapter = models.ForeignKey(
        Chapter,
        on_delete=models.CASCADE,
        related_name='progress_records'
    )

    completed = models.BooleanField(default=False)
    progress_percent = models.PositiveSmallIntegerField(default=0)
    last_position_seconds = models.PositiveIntegerField(default=0)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'chapter_progress'
        constraints = [
            models.UniqueConstraint(
                fields=['student_id', 'chapter'],
                name='unique_student_chapter_progress'
            ),
        ]
        indexes = [
            models.Index(fields=['student_id', 'course']),
        ]

    def __str__(self):
        return f"{self.student_id} - {self.chapter_id}: {self.progress_percent}%"

    def save(self, *args, **kwargs):
        self.progress_percent = max(0, min(100, int(self.progress_percent or 0)))
        if self.completed:
            self.progress_percent = 100
            if not self.completed_at:
                self.completed_at = timezone.now()
        else:
            self.completed_at = None
        super().save(*args, **kwargs)
