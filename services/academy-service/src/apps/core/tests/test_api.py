# services/academy-service/src/apps/core/tests/test_api.py
"""
API Tests

Tests for academy service REST API endpoints.
"""

import uuid

import pytest
from rest_framework import status


# =============================================================================
# Authentication Tests
# =============================================================================

@pytest.mark.django_db
class TestAuthentication:
    """Tests for token and subscription checks."""

    def test_requires_token(self, api_client, course):
        response = api_client.get(f'/api/v1/courses/{course.slug}/exam/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()['success'] is False
        assert response.json()['error']['code'] == 'NOT_AUTHENTICATED'

    def test_invalid_token(self, api_client, course):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')

        response = api_client.get(f'/api/v1/courses/{course.slug}/exam/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_requires_active_subscription(self, api_client, make_token, student_id, course):
        api_client.credentials(
            HTTP_AUTHORIZATION=f'Bearer {make_token(student_id, subscription_status="canceled")}'
        )

        response = api_client.get(f'/api/v1/courses/{course.slug}/exam/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()['error']['code'] == 'PERMISSION_DENIED'

    def test_admin_without_subscription(self, api_client, make_token, student_id, course):
        token = make_token(student_id, subscription_status=None, roles=['admin'])
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = api_client.get(f'/api/v1/courses/{course.slug}/exam/')

        assert response.status_code == status.HTTP_200_OK

    def test_requires_student_profile(self, api_client, make_token, course):
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {make_token(None)}')

        response = api_client.get(f'/api/v1/courses/{course.slug}/exam/')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_request_id_is_echoed(self, authenticated_client, course):
        response = authenticated_client.get(
            f'/api/v1/courses/{course.slug}/exam/',
            HTTP_X_REQUEST_ID='req-123'
        )

        assert response['X-Request-ID'] == 'req-123'


# =============================================================================
# Course Exam API Tests
# =============================================================================

@pytest.mark.django_db
class TestCourseExamAPI:
    """Tests for course exam endpoints."""

    def test_exam_not_eligible(self, authenticated_client, course, exam):
        response = authenticated_client.get(f'/api/v1/courses/{course.slug}/exam/')

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['eligible'] is False
        assert body['reason'] == 'incomplete_course'
        assert body['progress'] == {'completed': 0, 'total': 3, 'percentage': 0}
        assert body['course']['slug'] == course.slug

    def test_exam_eligible_hides_answer_key(self, authenticated_client, completed_course, exam):
        response = authenticated_client.get(f'/api/v1/courses/{completed_course.slug}/exam/')

        body = response.json()
        assert body['eligible'] is True
        assert body['exam']['questions_count'] == 4
        assert all('correct_option_index' not in q for q in body['exam']['questions'])
        assert body['stats']['total_attempts'] == 0

    def test_unknown_course(self, authenticated_client, db):
        response = authenticated_client.get('/api/v1/courses/no-such-course/exam/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()['error']['code'] == 'COURSE_NOT_FOUND'

    def test_submit_exam(self, authenticated_client, completed_course, exam, questions):
        answers = {str(q.id): q.correct_option_index for q in questions[:3]}

        response = authenticated_client.post(
            f'/api/v1/courses/{completed_course.slug}/exam/submit/',
            {'answers': answers},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()['data']
        assert data['score'] == 3
        assert data['percentage'] == 75
        assert data['passed'] is True
        assert data['question_results'][str(questions[3].id)]['selected_index'] is None

    def test_submit_not_eligible(self, authenticated_client, course, exam, correct_answers):
        from apps.core.models import ExamAttempt

        response = authenticated_client.post(
            f'/api/v1/courses/{course.slug}/exam/submit/',
            {'answers': correct_answers},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        error = response.json()['error']
        assert error['code'] == 'EXAM_NOT_ELIGIBLE'
        assert error['details']['reason'] == 'incomplete_course'
        assert ExamAttempt.objects.count() == 0

    def test_submit_invalid_option(self, authenticated_client, completed_course, exam, questions):
        response = authenticated_client.post(
            f'/api/v1/courses/{completed_course.slug}/exam/submit/',
            {'answers': {str(questions[0].id): 7}},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['error']['code'] == 'INVALID_OPTION_INDEX'

    def test_submit_without_answers(self, authenticated_client, completed_course, exam):
        response = authenticated_client.post(
            f'/api/v1/courses/{completed_course.slug}/exam/submit/',
            {},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    def test_exam_attempts(self, authenticated_client, completed_course, exam, correct_answers):
        authenticated_client.post(
            f'/api/v1/courses/{completed_course.slug}/exam/submit/',
            {'answers': {}},
            format='json'
        )
        authenticated_client.post(
            f'/api/v1/courses/{completed_course.slug}/exam/submit/',
            {'answers': correct_answers},
            format='json'
        )

        response = authenticated_client.get(f'/api/v1/courses/{completed_course.slug}/exam/attempts/')

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert len(body['data']) == 2
        assert body['best_score'] == 100
        assert body['passing_percentage'] == 70

    def test_get_attempt(self, authenticated_client, exam, student_id):
        from apps.core.services import ExamAttemptService

        attempt = ExamAttemptService.submit_attempt(student_id, exam.id, {})

        response = authenticated_client.get(f'/api/v1/attempts/{attempt.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['data']['attempt_id'] == str(attempt.id)

    def test_get_attempt_of_other_student(self, authenticated_client, exam, other_student_id):
        from apps.core.services import ExamAttemptService

        attempt = ExamAttemptService.submit_attempt(other_student_id, exam.id, {})

        response = authenticated_client.get(f'/api/v1/attempts/{attempt.id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()['error']['code'] == 'ATTEMPT_NOT_FOUND'


# =============================================================================
# Course Progress API Tests
# =============================================================================

@pytest.mark.django_db
class TestCourseProgressAPI:
    """Tests for course progress endpoints."""

    def test_record_progress(self, authenticated_client, course, chapters):
        response = authenticated_client.post(
            f'/api/v1/courses/{course.slug}/progress/',
            {'chapter_id': str(chapters[0].id), 'progress_percent': 45, 'last_position_seconds': 120},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['data']['progress_percent'] == 45
        assert body['course_completed'] is False

    def test_completing_last_chapter(self, authenticated_client, course, chapters):
        for chapter in chapters:
            response = authenticated_client.post(
                f'/api/v1/courses/{course.slug}/progress/',
                {'chapter_id': str(chapter.id), 'completed': True},
                format='json'
            )

        assert response.json()['course_completed'] is True

        summary = authenticated_client.get(f'/api/v1/courses/{course.slug}/progress/').json()['data']
        assert summary['percentage'] == 100
        assert summary['is_complete'] is True

    def test_chapter_of_other_course(self, authenticated_client, course, empty_course, chapters):
        response = authenticated_client.post(
            f'/api/v1/courses/{empty_course.slug}/progress/',
            {'chapter_id': str(chapters[0].id), 'completed': True},
            format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()['error']['code'] == 'CHAPTER_NOT_FOUND'


# =============================================================================
# Affiliate API Tests
# =============================================================================

@pytest.mark.django_db
class TestAffiliateAPI:
    """Tests for affiliate endpoints."""

    def test_join_program(self, authenticated_client):
        response = authenticated_client.post(
            '/api/v1/affiliate/',
            {'referral_code': 'MYCODE', 'paypal_email': 'me@example.com'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()['data']
        assert data['referral_code'] == 'MYCODE'
        assert data['pending_balance_cents'] == 0

    def test_join_twice(self, authenticated_client, affiliate):
        response = authenticated_client.post('/api/v1/affiliate/', {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()['error']['code'] == 'ALREADY_AFFILIATE'

    def test_dashboard(self, authenticated_client, funded_affiliate):
        response = authenticated_client.get('/api/v1/affiliate/')

        assert response.status_code == status.HTTP_200_OK
        data = response.json()['data']
        assert data['affiliate']['pending_balance_cents'] == 2500
        assert len(data['recent_commissions']) == 1
        assert data['recent_payouts'] == []

    def test_dashboard_without_affiliate(self, authenticated_client, db):
        response = authenticated_client.get('/api/v1/affiliate/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()['error']['code'] == 'AFFILIATE_NOT_FOUND'

    def test_update_payout_destination(self, authenticated_client, affiliate):
        response = authenticated_client.patch(
            '/api/v1/affiliate/',
            {'paypal_email': 'new@example.com'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        affiliate.refresh_from_db()
        assert affiliate.paypal_email == 'new@example.com'

    def test_request_payout(self, authenticated_client, funded_affiliate):
        response = authenticated_client.post('/api/v1/affiliate/payout/', {}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()['data']['amount_cents'] == 2500
        assert response.json()['data']['status'] == 'pending'

    def test_request_payout_below_minimum(self, authenticated_client, affiliate):
        from apps.core.services import CommissionService

        CommissionService.accrue_commission(affiliate.id, uuid.uuid4(), 1875)

        response = authenticated_client.post('/api/v1/affiliate/payout/', {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        error = response.json()['error']
        assert error['code'] == 'BELOW_MINIMUM_PAYOUT'
        assert error['details']['balance_cents'] == 1500
        assert error['details']['minimum_cents'] == 2000

    def test_request_payout_twice(self, authenticated_client, funded_affiliate):
        first = authenticated_client.post('/api/v1/affiliate/payout/', {}, format='json')
        second = authenticated_client.post('/api/v1/affiliate/payout/', {}, format='json')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_400_BAD_REQUEST
        assert second.json()['error']['code'] == 'BELOW_MINIMUM_PAYOUT'

    def test_list_commissions(self, authenticated_client, funded_affiliate):
        response = authenticated_client.get('/api/v1/affiliate/commissions/')

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['count'] == 1
        assert body['results'][0]['commission_cents'] == 2500
        assert body['results'][0]['is_settled'] is False

    def test_list_payouts(self, authenticated_client, funded_affiliate):
        authenticated_client.post('/api/v1/affiliate/payout/', {}, format='json')

        response = authenticated_client.get('/api/v1/affiliate/payouts/')

        assert response.json()['count'] == 1


# =============================================================================
# Referral Link API Tests
# =============================================================================

@pytest.mark.django_db
class TestReferralClickAPI:
    """Tests for the anonymous referral click endpoint."""

    def test_record_click(self, api_client, affiliate):
        response = api_client.post(
            '/api/v1/referrals/ALICE01/click/',
            HTTP_USER_AGENT='Mozilla/5.0',
            REMOTE_ADDR='203.0.113.7'
        )

        assert response.status_code == status.HTTP_201_CREATED
        affiliate.refresh_from_db()
        assert affiliate.link_clicks == 1
        click = affiliate.link_click_records.get()
        assert click.ip_address == '203.0.113.7'
        assert click.user_agent == 'Mozilla/5.0'

    def test_unknown_code(self, api_client, db):
        response = api_client.post('/api/v1/referrals/NOPE/click/')

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Internal Event API Tests
# =============================================================================

@pytest.mark.django_db
class TestInternalEventAPI:
    """Tests for the service-to-service event endpoint."""

    def test_requires_service_token(self, authenticated_client):
        response = authenticated_client.post(
            '/api/v1/internal/events/',
            {'event_type': 'payment.settled', 'data': {}},
            format='json'
        )

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_wrong_service_token(self, api_client):
        api_client.credentials(HTTP_X_SERVICE_AUTH='wrong')

        response = api_client.post(
            '/api/v1/internal/events/',
            {'event_type': 'payment.settled', 'data': {}},
            format='json'
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_payment_settled(self, service_client, affiliate):
        referred = uuid.uuid4()
        service_client.post(
            '/api/v1/internal/events/',
            {
                'event_type': 'student.registered',
                'data': {'student_id': str(referred), 'referral_code': 'ALICE01'},
            },
            format='json'
        )

        response = service_client.post(
            '/api/v1/internal/events/',
            {
                'event_type': 'payment.settled',
                'data': {'student_id': str(referred), 'amount_cents': 700, 'payment_reference': 'pay_9'},
            },
            format='json'
        )

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.json()['handled'] is True
        affiliate.refresh_from_db()
        assert affiliate.pending_balance_cents == 560

    def test_malformed_student_id(self, service_client, db):
        response = service_client.post(
            '/api/v1/internal/events/',
            {
                'event_type': 'payment.settled',
                'data': {'student_id': 'not-a-uuid', 'amount_cents': 700},
            },
            format='json'
        )

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.json()['known'] is True
        assert response.json()['handled'] is False

    def test_unknown_event_type(self, service_client, db):
        response = service_client.post(
            '/api/v1/internal/events/',
            {'event_type': 'something.else', 'data': {}},
            format='json'
        )

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.json()['known'] is False


# =============================================================================
# Health Check Tests
# =============================================================================

@pytest.mark.django_db
class TestHealthChecks:

    def test_health(self, api_client):
        response = api_client.get('/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['service'] == 'academy-service'

    def test_ready(self, api_client):
        response = api_client.get('/ready/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['checks']['database'] == 'connected'
