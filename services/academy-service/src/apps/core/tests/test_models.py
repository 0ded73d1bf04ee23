# services/academy-service/src/apps/core/tests/test_models.py
"""
Model Tests

Tests for academy service database models.
"""

import uuid
from decimal import Decimal

import pytest
from django.db import IntegrityError
from django.utils import timezone


# =============================================================================
# Course Model Tests
# =============================================================================

@pytest.mark.django_db
class TestCourseModel:
    """Tests for Course and Chapter models."""

    def test_chapter_count(self, course):
        assert course.chapter_count == 3

    def test_summary(self, course):
        summary = course.get_summary()

        assert summary['slug'] == 'intro-to-trading'
        assert summary['chapter_count'] == 3

    def test_uuid_keys_and_timestamps(self, exam):
        chapter = exam.course.chapters.first()

        for instance in (exam.course, chapter, exam, exam.questions.first()):
            assert isinstance(instance.pk, uuid.UUID)
            assert instance.created_at is not None
            assert instance.updated_at is not None


# =============================================================================
# ChapterProgress Model Tests
# =============================================================================

@pytest.mark.django_db
class TestChapterProgressModel:
    """Tests for ChapterProgress model."""

    def test_completed_forces_full_progress(self, chapters, student_id):
        from apps.core.models import ChapterProgress

        progress = ChapterProgress.objects.create(
            student_id=student_id,
            course=chapters[0].course,
            chapter=chapters[0],
            completed=True,
            progress_percent=40,
        )

        assert progress.progress_percent == 100
        assert progress.completed_at is not None

    def test_progress_percent_is_clamped(self, chapters, student_id):
        from apps.core.models import ChapterProgress

        progress = ChapterProgress.objects.create(
            student_id=student_id,
            course=chapters[0].course,
            chapter=chapters[0],
            progress_percent=250,
        )

        assert progress.progress_percent == 100
        assert progress.completed is False
        assert progress.completed_at is None

    def test_one_row_per_student_and_chapter(self, chapters, student_id):
        from apps.core.models import ChapterProgress

        ChapterProgress.objects.create(
            student_id=student_id, course=chapters[0].course, chapter=chapters[0]
        )

        with pytest.raises(IntegrityError):
            ChapterProgress.objects.create(
                student_id=student_id, course=chapters[0].course, chapter=chapters[0]
            )


# =============================================================================
# Exam Model Tests
# =============================================================================

@pytest.mark.django_db
class TestExamModel:
    """Tests for Exam and ExamQuestion models."""

    def test_public_payload_hides_answer_key(self, exam):
        payload = exam.get_public_payload()

        assert payload['questions_count'] == 4
        for question in payload['questions']:
            assert 'correct_option_index' not in question
            assert len(question['options']) == 4

    def test_question_order(self, exam):
        payload = exam.get_public_payload()

        assert [q['sort_order'] for q in payload['questions']] == [0, 1, 2, 3]

    def test_option_texts_accept_plain_strings(self, exam):
        from apps.core.models import ExamQuestion

        question = ExamQuestion.objects.create(
            exam=exam,
            question_text='Legacy question',
            options=['One', 'Two', 'Three', 'Four'],
            correct_option_index=1,
        )

        assert question.get_option_texts() == ['One', 'Two', 'Three', 'Four']


# =============================================================================
# ExamAttempt Model Tests
# =============================================================================

@pytest.mark.django_db
class TestExamAttemptModel:
    """Tests for ExamAttempt model."""

    def test_attempt_cannot_be_modified(self, exam, student_id):
        from apps.core.models import ExamAttempt

        attempt = ExamAttempt.objects.create(
            student_id=student_id,
            exam=exam,
            score=3,
            total_questions=4,
            percentage=75,
            passed=True,
            passing_percentage=70,
            completed_at=timezone.now(),
        )
        attempt.percentage = 100

        with pytest.raises(ValueError):
            attempt.save()

        attempt.refresh_from_db()
        assert attempt.percentage == 75


# =============================================================================
# Affiliate Model Tests
# =============================================================================

@pytest.mark.django_db
class TestAffiliateModel:
    """Tests for Affiliate model."""

    def test_conversion_rate_without_clicks(self, affiliate):
        assert affiliate.conversion_rate == Decimal('0.00')

    def test_conversion_rate_percentage(self, affiliate):
        affiliate.referral_count = 1
        affiliate.link_clicks = 3

        assert affiliate.conversion_rate == Decimal('33.33')

    def test_has_payout_destination(self, affiliate):
        assert affiliate.has_payout_destination is True

        affiliate.paypal_email = None
        assert affiliate.has_payout_destination is False

    def test_referral_code_unique(self, affiliate):
        from apps.core.models import Affiliate

        with pytest.raises(IntegrityError):
            Affiliate.objects.create(student_id=uuid.uuid4(), referral_code='ALICE01')

    def test_commission_is_settled(self, affiliate):
        from apps.core.models import Commission, CommissionStatus

        commission = Commission.objects.create(
            affiliate=affiliate,
            referred_student_id=uuid.uuid4(),
            subscription_amount_cents=1000,
            commission_cents=800,
        )
        assert commission.is_settled is False

        commission.status = CommissionStatus.CANCELLED
        assert commission.is_settled is True
