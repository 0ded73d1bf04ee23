# services/academy-service/src/apps/core/tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for academy service tests.
"""

import uuid

import pytest


# =============================================================================
# UUID Fixtures
# =============================================================================

@pytest.fixture
def student_id():
    """Generate student ID."""
    return uuid.uuid4()


@pytest.fixture
def other_student_id():
    """Generate a second student ID."""
    return uuid.uuid4()


@pytest.fixture
def user_id():
    """Generate identity user ID."""
    return uuid.uuid4()


# =============================================================================
# Course Fixtures
# =============================================================================

@pytest.fixture
def course(db):
    """Published course with three chapters."""
    from apps.core.models import Course, Chapter

    course = Course.objects.create(
        slug='intro-to-trading',
        title='Intro to Trading',
        is_published=True,
    )
    for position in range(3):
        Chapter.objects.create(
            course=course,
            title=f'Chapter {position + 1}',
            sort_order=position,
            duration_seconds=600,
        )
    return course


@pytest.fixture
def empty_course(db):
    """Published course without chapters."""
    from apps.core.models import Course

    return Course.objects.create(slug='empty-course', title='Empty Course', is_published=True)


@pytest.fixture
def chapters(course):
    return list(course.chapters.order_by('sort_order'))


@pytest.fixture
def completed_course(course, chapters, student_id):
    """Course whose chapters are all completed by the student."""
    from apps.core.services import ProgressService

    for chapter in chapters:
        ProgressService.mark_completed(student_id=student_id, chapter_id=chapter.id)
    return course


# =============================================================================
# Exam Fixtures
# =============================================================================

def _options(*texts):
    return [{'text': text} for text in texts]


@pytest.fixture
def exam(course):
    """Enabled exam with four questions; the correct option is the question's position mod 4."""
    from apps.core.models import Exam, ExamQuestion

    exam = Exam.objects.create(
        course=course,
        title='Final Exam',
        passing_percentage=70,
        is_enabled=True,
    )
    for position in range(4):
        ExamQuestion.objects.create(
            exam=exam,
            question_text=f'Question number {position + 1}?',
            options=_options('Alpha', 'Bravo', 'Charlie', 'Delta'),
            correct_option_index=position % 4,
            sort_order=position,
        )
    return exam


@pytest.fixture
def questions(exam):
    return list(exam.questions.order_by('sort_order'))


@pytest.fixture
def correct_answers(questions):
    """Answers map with every question answered correctly."""
    return {str(q.id): q.correct_option_index for q in questions}


@pytest.fixture
def make_exam(db):
    """Factory fixture for exams with a given number of questions."""
    from apps.core.models import Course, Exam, ExamQuestion

    def _make_exam(question_count=3, passing_percentage=70, is_enabled=True, slug=None):
        course = Course.objects.create(
            slug=slug or f'course-{uuid.uuid4().hex[:8]}',
            title='Generated Course',
            is_published=True,
        )
        exam = Exam.objects.create(
            course=course,
            title='Generated Exam',
            passing_percentage=passing_percentage,
            is_enabled=is_enabled,
        )
        for position in range(question_count):
            ExamQuestion.objects.create(
                exam=exam,
                question_text=f'Generated question {position + 1}',
                options=_options('A1', 'B2', 'C3', 'D4'),
                correct_option_index=0,
                sort_order=position,
            )
        return exam

    return _make_exam


# =============================================================================
# Affiliate Fixtures
# =============================================================================

@pytest.fixture
def affiliate(db, student_id):
    """Active affiliate with a payout destination."""
    from apps.core.models import Affiliate

    return Affiliate.objects.create(
        student_id=student_id,
        referral_code='ALICE01',
        paypal_email='alice@example.com',
    )


@pytest.fixture
def funded_affiliate(affiliate):
    """Affiliate with 2500 cents pending."""
    from apps.core.services import CommissionService

    CommissionService.accrue_commission(
        affiliate_id=affiliate.id,
        referred_student_id=uuid.uuid4(),
        subscription_amount_cents=3125,
        payment_reference='pay_funded',
    )
    affiliate.refresh_from_db()
    return affiliate


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Get Django REST framework API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def make_token(user_id):
    """Factory fixture for identity tokens."""
    from shared.common.authentication import JWTTokenGenerator

    def _make_token(student_id=None, subscription_status='active', roles=None):
        return JWTTokenGenerator.generate_access_token(
            user_id=str(user_id),
            student_id=str(student_id) if student_id else None,
            email='student@example.com',
            roles=roles,
            subscription_status=subscription_status,
        )

    return _make_token


@pytest.fixture
def authenticated_client(api_client, make_token, student_id):
    """API client authenticated as a subscribed student."""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {make_token(student_id)}')
    return api_client


@pytest.fixture
def service_client(api_client):
    """API client authenticated with the internal service token."""
    api_client.credentials(
        HTTP_X_SERVICE_AUTH='test-service-token',
        HTTP_X_SOURCE_SERVICE='payment-service',
    )
    return api_client
