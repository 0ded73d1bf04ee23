# services/academy-service/src/apps/core/events/handlers.py
"""
Event Handlers

Functions for handling events from other services. Handlers report
success as a boolean and never raise to the caller.
"""

import logging
from typing import Dict, Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError

from ..services.exceptions import AcademyServiceError

logger = logging.getLogger(__name__)


def handle_payment_settled(event_data: Dict[str, Any]) -> bool:
    """
    Handle a settled subscription payment from the payment webhook relay.

    Accrues a commission for the affiliate who referred the paying
    student. Payments of students nobody referred are ignored.

    Args:
        event_data: student_id, amount_cents, payment_reference and an
            optional affiliate_id

    Returns:
        True if handled successfully
    """
    from ..services import CommissionService

    student_id = event_data.get('student_id')
    amount_cents = event_data.get('amount_cents')

    if not student_id or amount_cents is None:
        logger.warning("Payment settled event without student or amount", extra={'event_data': event_data})
        return False

    try:
        if event_data.get('affiliate_id'):
            CommissionService.accrue_commission(
                affiliate_id=event_data['affiliate_id'],
                referred_student_id=student_id,
                subscription_amount_cents=int(amount_cents),
                payment_reference=event_data.get('payment_reference'),
            )
        else:
            CommissionService.accrue_for_referred_student(
                referred_student_id=student_id,
                subscription_amount_cents=int(amount_cents),
                payment_reference=event_data.get('payment_reference'),
            )
        return True

    except (AcademyServiceError, DjangoValidationError, ValueError) as e:
        logger.warning(f"Commission not accrued: {e}", extra={'event_data': event_data})
        return False
    except DatabaseError as e:
        logger.error(f"Error handling payment settled event: {e}", extra={'event_data': event_data})
        return False


def handle_payment_refunded(event_data: Dict[str, Any]) -> bool:
    """
    Handle a refunded or charged-back payment.

    Cancels the commission accrued on it while it is still pending.
    """
    from ..services import CommissionService

    payment_reference = event_data.get('payment_reference')
    if not payment_reference:
        return False

    try:
        CommissionService.cancel_for_payment(
            payment_reference,
            reason=event_data.get('reason', 'refund'),
        )
        return True

    except (AcademyServiceError, DjangoValidationError) as e:
        logger.warning(f"Commission not cancelled: {e}", extra={'event_data': event_data})
        return False
    except DatabaseError as e:
        logger.error(f"Error handling payment refunded event: {e}", extra={'event_data': event_data})
        return False


def handle_subscription_cancelled(event_data: Dict[str, Any]) -> bool:
    """
    Handle the end of a student's subscription.

    Deactivates the student's own affiliate account and marks the student
    as churned for the affiliate who referred them.
    """
    from ..services import AffiliateService

    student_id = event_data.get('student_id')
    if not student_id:
        return False

    try:
        AffiliateService.deactivate(student_id)
        AffiliateService.mark_referral_churned(student_id)
        return True
    except DjangoValidationError as e:
        logger.warning(f"Subscription cancellation not applied: {e}", extra={'event_data': event_data})
        return False
    except DatabaseError as e:
        logger.error(f"Error handling subscription cancelled event: {e}", extra={'event_data': event_data})
        return False


def handle_student_registered(event_data: Dict[str, Any]) -> bool:
    """Attribute a newly registered student to the affiliate whose code they used."""
    from ..services import AffiliateService

    student_id = event_data.get('student_id')
    referral_code = event_data.get('referral_code')

    if not student_id:
        return False

    if not referral_code:
        return True

    try:
        return AffiliateService.register_referral(referral_code, student_id) is not None
    except DjangoValidationError as e:
        logger.warning(f"Referral not registered: {e}", extra={'event_data': event_data})
        return False
    except DatabaseError as e:
        logger.error(f"Error handling student registered event: {e}", extra={'event_data': event_data})
        return False


def handle_payout_completed(event_data: Dict[str, Any]) -> bool:
    """Handle a successful payout notification from the payment provider."""
    from ..services import PayoutService

    payout_id = event_data.get('payout_id')
    if not payout_id:
        return False

    try:
        PayoutService.complete_payout(
            payout_id,
            external_reference=event_data.get('external_reference', ''),
        )
        return True

    except (AcademyServiceError, DjangoValidationError) as e:
        logger.warning(f"Payout not completed: {e}", extra={'event_data': event_data})
        return False
    except DatabaseError as e:
        logger.error(f"Error handling payout completed event: {e}", extra={'event_data': event_data})
        return False


def handle_payout_failed(event_data: Dict[str, Any]) -> bool:
    """Handle a failed or denied payout notification from the payment provider."""
    from ..services import PayoutService

    payout_id = event_data.get('payout_id')
    if not payout_id:
        return False

    try:
        PayoutService.fail_payout(
            payout_id,
            reason=event_data.get('reason', ''),
        )
        return True

    except (AcademyServiceError, DjangoValidationError) as e:
        logger.warning(f"Payout not failed: {e}", extra={'event_data': event_data})
        return False
    except DatabaseError as e:
        logger.error(f"Error handling payout failed event: {e}", extra={'event_data': event_data})
        return False


# Event handler registry
EVENT_HANDLERS = {
    'payment.settled': handle_payment_settled,
    'payment.refunded': handle_payment_refunded,
    'subscription.cancelled': handle_subscription_cancelled,
    'student.registered': handle_student_registered,
    'payout.completed': handle_payout_completed,
    'payout.failed': handle_payout_failed,
}


def dispatch_event(event_type: str, event_data: Dict[str, Any]) -> bool:
    """
    Dispatch an event to the appropriate handler.

    Args:
        event_type: Type of event
        event_data: Event data

    Returns:
        True if handled successfully
    """
    handler = EVENT_HANDLERS.get(event_type)

    if not handler:
        logger.debug(f"No handler registered for event type: {event_type}")
        return True

    return handler(event_data)
