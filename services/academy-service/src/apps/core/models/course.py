# services/academy-service/src/apps/core/models/course.py
"""
Course Models

Models for courses and their chapters.
"""

from typing import Dict, Any

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class Course(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Course model.

    A published course is a sequence of chapters that may be followed
    by a final exam.
    """

    slug = models.SlugField(max_length=200, unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    is_published = models.BooleanField(default=False, db_index=True)

    class Meta:
        db_table = 'courses'
        ordering = ['title']

    def __str__(self):
        return self.title

    @property
    def chapter_count(self) -> int:
        return self.chapters.count()

    def get_summary(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'slug': self.slug,
            'title': self.title,
            'is_published': self.is_published,
            'chapter_count': self.chapter_count,
        }


class Chapter(UUIDPrimaryKeyMixin, TimestampMixin):
    """Course chapter."""

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='chapters'
    )
    title = models.CharField(max_length=255)
    sort_order = models.PositiveIntegerField(default=0)
    duration_seconds = models.PositiveIntegerField(default=0)
    is_published = models.BooleanField(default=True)

    class Meta:
        db_table = 'course_chapters'
        ordering = ['course', 'sort_order']

    def __str__(self):
        return f"{self.course.title} - {self.title}"
