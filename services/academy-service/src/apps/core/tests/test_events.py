# services/academy-service/src/apps/core/tests/test_events.py
"""
Event and Task Tests

Tests for inbound event handlers and periodic commission tasks.
"""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone


# =============================================================================
# Event Handler Tests
# =============================================================================

@pytest.mark.django_db
class TestEventHandlers:
    """Tests for event handlers."""

    def test_payment_settled_with_affiliate(self, affiliate):
        from apps.core.events.handlers import handle_payment_settled

        handled = handle_payment_settled({
            'student_id': str(uuid.uuid4()),
            'amount_cents': 700,
            'payment_reference': 'pay_evt',
            'affiliate_id': str(affiliate.id),
        })
        affiliate.refresh_from_db()

        assert handled is True
        assert affiliate.pending_balance_cents == 560

    def test_payment_settled_for_unreferred_student(self, affiliate):
        from apps.core.events.handlers import handle_payment_settled
        from apps.core.models import Commission

        handled = handle_payment_settled({'student_id': str(uuid.uuid4()), 'amount_cents': 700})

        assert handled is True
        assert Commission.objects.count() == 0

    def test_payment_settled_missing_fields(self, db):
        from apps.core.events.handlers import handle_payment_settled

        assert handle_payment_settled({'amount_cents': 700}) is False

    def test_payment_settled_inactive_affiliate(self, affiliate):
        from apps.core.events.handlers import handle_payment_settled

        affiliate.is_active = False
        affiliate.save()

        handled = handle_payment_settled({
            'student_id': str(uuid.uuid4()),
            'amount_cents': 700,
            'affiliate_id': str(affiliate.id),
        })

        assert handled is False

    def test_payment_refunded(self, affiliate):
        from apps.core.events.handlers import handle_payment_refunded
        from apps.core.models import CommissionStatus
        from apps.core.services import CommissionService

        commission = CommissionService.accrue_commission(affiliate.id, uuid.uuid4(), 700, 'pay_refund')

        assert handle_payment_refunded({'payment_reference': 'pay_refund'}) is True

        commission.refresh_from_db()
        affiliate.refresh_from_db()
        assert commission.status == CommissionStatus.CANCELLED
        assert affiliate.pending_balance_cents == 0

    def test_refund_after_payout_request(self, funded_affiliate):
        from apps.core.events.handlers import handle_payment_refunded
        from apps.core.models import CommissionStatus
        from apps.core.services import PayoutService

        PayoutService.request_payout(funded_affiliate.id)

        assert handle_payment_refunded({'payment_reference': 'pay_funded'}) is True
        assert funded_affiliate.commissions.get().status == CommissionStatus.CANCELLED

    def test_refund_of_paid_out_commission(self, funded_affiliate):
        from apps.core.events.handlers import handle_payment_refunded
        from apps.core.services import PayoutService

        payout = PayoutService.request_payout(funded_affiliate.id)
        PayoutService.complete_payout(payout.id)

        assert handle_payment_refunded({'payment_reference': 'pay_funded'}) is False

    def test_subscription_cancelled(self, affiliate, student_id):
        from apps.core.events.handlers import handle_subscription_cancelled

        assert handle_subscription_cancelled({'student_id': str(student_id)}) is True

        affiliate.refresh_from_db()
        assert affiliate.is_active is False

    def test_student_registered(self, affiliate):
        from apps.core.events.handlers import handle_student_registered

        referred = uuid.uuid4()

        assert handle_student_registered({'student_id': str(referred), 'referral_code': 'ALICE01'}) is True
        assert affiliate.referrals.filter(referred_student_id=referred).exists()

    def test_student_registered_without_code(self, db):
        from apps.core.events.handlers import handle_student_registered

        assert handle_student_registered({'student_id': str(uuid.uuid4())}) is True

    def test_payout_completed_and_failed(self, funded_affiliate):
        from apps.core.events.handlers import handle_payout_completed, handle_payout_failed
        from apps.core.models import PayoutStatus
        from apps.core.services import PayoutService

        payout = PayoutService.request_payout(funded_affiliate.id)

        assert handle_payout_completed({'payout_id': str(payout.id), 'external_reference': 'pp_1'}) is True
        payout.refresh_from_db()
        assert payout.status == PayoutStatus.COMPLETED

        # A completed payout can no longer fail
        assert handle_payout_failed({'payout_id': str(payout.id), 'reason': 'late'}) is False

    def test_payout_failed(self, funded_affiliate):
        from apps.core.events.handlers import handle_payout_failed
        from apps.core.services import PayoutService

        payout = PayoutService.request_payout(funded_affiliate.id)

        assert handle_payout_failed({'payout_id': str(payout.id), 'reason': 'denied'}) is True
        funded_affiliate.refresh_from_db()
        assert funded_affiliate.pending_balance_cents == 2500

    def test_dispatch_event(self, affiliate, student_id):
        from apps.core.events.handlers import dispatch_event

        assert dispatch_event('subscription.cancelled', {'student_id': str(student_id)}) is True
        assert dispatch_event('unknown.event', {}) is True

    @pytest.mark.parametrize('event_type,event_data', [
        ('payment.settled', {'student_id': 'not-a-uuid', 'amount_cents': 700}),
        ('subscription.cancelled', {'student_id': 'not-a-uuid'}),
        ('student.registered', {'student_id': 'not-a-uuid', 'referral_code': 'ALICE01'}),
        ('payout.completed', {'payout_id': 'not-a-uuid'}),
        ('payout.failed', {'payout_id': 'not-a-uuid'}),
    ])
    def test_malformed_ids_are_not_handled(self, affiliate, event_type, event_data):
        from apps.core.events.handlers import dispatch_event

        assert dispatch_event(event_type, event_data) is False


# =============================================================================
# Task Tests
# =============================================================================

@pytest.mark.django_db
class TestCommissionTasks:
    """Tests for commission Celery tasks."""

    def test_approve_matured_commissions(self, affiliate):
        from apps.core.models import Commission, CommissionStatus
        from apps.core.services import CommissionService
        from apps.core.tasks.commission_tasks import approve_matured_commissions

        commission = CommissionService.accrue_commission(affiliate.id, uuid.uuid4(), 700)
        Commission.objects.filter(id=commission.id).update(
            created_at=timezone.now() - timedelta(days=30)
        )

        result = approve_matured_commissions.delay()

        assert result.get() == {'count': 1}
        commission.refresh_from_db()
        assert commission.status == CommissionStatus.APPROVED

    def test_reconcile_affiliate_balances(self, funded_affiliate):
        from apps.core.models import Affiliate
        from apps.core.tasks.commission_tasks import reconcile_affiliate_balances

        assert reconcile_affiliate_balances() == {'count': 0}

        Affiliate.objects.filter(id=funded_affiliate.id).update(total_earnings_cents=1)

        assert reconcile_affiliate_balances() == {'count': 1}


# =============================================================================
# Exception Handler Tests
# =============================================================================

class TestExceptionHandler:
    """Tests for the shared error envelope."""

    def test_service_error_status(self):
        from apps.core.services.exceptions import (
            AlreadySettledError,
            BelowMinimumPayoutError,
            CourseNotFoundError,
            ExamNotEligibleError,
        )
        from shared.common.exceptions import custom_exception_handler

        cases = [
            (CourseNotFoundError('x'), 404),
            (BelowMinimumPayoutError(1500, 2000), 400),
            (AlreadySettledError(), 409),
            (ExamNotEligibleError('exam_disabled'), 403),
        ]

        for exc, expected in cases:
            response = custom_exception_handler(exc, {})
            assert response.status_code == expected
            assert response.data['success'] is False
            assert response.data['error']['code'] == exc.code

    def test_database_error(self):
        from django.db import OperationalError
        from shared.common.exceptions import custom_exception_handler

        response = custom_exception_handler(OperationalError('gone'), {})

        assert response.status_code == 503
        assert response.data['error']['code'] == 'SERVICE_UNAVAILABLE'
