# services/academy-service/src/apps/core/services/progress_service.py
"""
Progress Service

Business logic for tracking chapter progress and course completion.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Optional

from django.db import transaction

from ..models import Course, Chapter, ChapterProgress
from .exceptions import CourseNotFoundError, ChapterNotFoundError

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for recording chapter progress and answering completion queries."""

    # =========================================================================
    # COURSE LOOKUP
    # =========================================================================

    @staticmethod
    def get_published_course(slug: str) -> Course:
        """
        Get a published course by slug.

        Raises:
            CourseNotFoundError: If the course does not exist or is unpublished
        """
        try:
            return Course.objects.get(slug=slug, is_published=True)
        except Course.DoesNotExist:
            raise CourseNotFoundError(slug)

    @staticmethod
    def _get_chapter(chapter_id: str, course_id: str = None) -> Chapter:
        filters = {'id': chapter_id}
        if course_id:
            filters['course_id'] = course_id

        try:
            return Chapter.objects.get(**filters)
        except Chapter.DoesNotExist:
            raise ChapterNotFoundError(chapter_id)

    # =========================================================================
    # PROGRESS RECORDING
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def record_progress(
        student_id: str,
        chapter_id: str,
        progress_percent: Optional[int] = None,
        last_position_seconds: Optional[int] = None,
        completed: Optional[bool] = None,
        course_id: str = None,
    ) -> ChapterProgress:
        """
        Upsert the progress row of a student on a chapter.

        Args:
            student_id: Student ID
            chapter_id: Chapter ID
            progress_percent: Playback percentage, clamped to 0..100
            last_position_seconds: Last playback position
            completed: True marks the chapter completed, False clears completion
            course_id: Optional course the chapter must belong to

        Returns:
            Progress row
        """
        if completed:
            return ProgressService.mark_completed(
                student_id=student_id,
                chapter_id=chapter_id,
                course_id=course_id,
                last_position_seconds=last_position_seconds,
            )

        chapter = ProgressService._get_chapter(chapter_id, course_id)

        progress, created = ChapterProgress.objects.select_for_update().get_or_create(
            student_id=student_id,
            chapter=chapter,
            defaults={'course_id': chapter.course_id}
        )

        if completed is False:
            progress.completed = False

        if progress_percent is not None:
            progress.progress_percent = max(0, min(100, int(progress_percent)))

        if last_position_seconds is not None:
            progress.last_position_seconds = max(0, int(last_position_seconds))

        progress.save()

        logger.debug(
            f"Recorded progress for student {student_id} on chapter {chapter.id}: "
            f"{progress.progress_percent}%",
            extra={'created': created}
        )

        return progress

    @staticmethod
    @transaction.atomic
    def mark_completed(
        student_id: str,
        chapter_id: str,
        course_id: str = None,
        last_position_seconds: Optional[int] = None,
    ) -> ChapterProgress:
        """
        Mark a chapter as completed for a student.

        Idempotent: completing an already completed chapter keeps its
        original completion time.
        """
        chapter = ProgressService._get_chapter(chapter_id, course_id)

        progress, _ = ChapterProgress.objects.select_for_update().get_or_create(
            student_id=student_id,
            chapter=chapter,
            defaults={'course_id': chapter.course_id}
        )

        progress.completed = True
        if last_position_seconds is not None:
            progress.last_position_seconds = max(0, int(last_position_seconds))
        progress.save()

        logger.info(f"Chapter {chapter.id} completed by student {student_id}")

        return progress

    # =========================================================================
    # COMPLETION QUERIES
    # =========================================================================

    @staticmethod
    def is_course_complete(student_id: str, course_id: str) -> bool:
        """
        Check whether a student completed every chapter of a course.

        A course without chapters is never complete.
        """
        total = Chapter.objects.filter(course_id=course_id).count()
        if total == 0:
            return False

        completed = ChapterProgress.objects.filter(
            student_id=student_id,
            chapter__course_id=course_id,
            completed=True
        ).count()

        return completed >= total

    @staticmethod
    def get_course_progress(student_id: str, course_id: str) -> Dict[str, Any]:
        """
        Get completion summary of a course for a student.

        Returns:
            Dict with completed, total, percentage and per-chapter rows
        """
        chapters = list(
            Chapter.objects.filter(course_id=course_id).order_by('sort_order')
        )
        rows = {
            p.chapter_id: p
            for p in ChapterProgress.objects.filter(
                student_id=student_id,
                chapter__course_id=course_id
            )
        }

        total = len(chapters)
        completed = sum(1 for p in rows.values() if p.completed)

        if total:
            percentage = int(
                (Decimal(completed) * 100 / Decimal(total)).quantize(
                    Decimal('1'), rounding=ROUND_HALF_UP
                )
            )
        else:
            percentage = 0

        return {
            'completed': completed,
            'total': total,
            'percentage': percentage,
            'is_complete': total > 0 and completed >= total,
            'chapters': [
                {
                    'chapter_id': str(chapter.id),
                    'title': chapter.title,
                    'completed': rows[chapter.id].completed if chapter.id in rows else False,
                    'progress_percent': rows[chapter.id].progress_percent if chapter.id in rows else 0,
                    'last_position_seconds': rows[chapter.id].last_position_seconds if chapter.id in rows else 0,
                }
                for chapter in chapters
            ],
        }
