# services/academy-service/src/apps/core/events/publishers.py
"""
Event Publishers

Functions for publishing events to other services.
"""

import logging
from typing import Dict, Any

from django.utils import timezone

logger = logging.getLogger(__name__)


def _publish_event(event_type: str, data: Dict[str, Any]) -> None:
    """
    Publish an event to the message broker.

    Args:
        event_type: Type of event
        data: Event data payload
    """
    event = {
        'type': event_type,
        'timestamp': timezone.now().isoformat(),
        'service': 'academy-service',
        'data': data
    }

    # Events are emitted as structured log records for the log shipper
    logger.info(f"Publishing event: {event_type}", extra={'event_data': event})


def publish_exam_submitted(
    attempt_id: str,
    student_id: str,
    exam_id: str,
    course_id: str,
    percentage: int,
    passed: bool
) -> None:
    """Publish exam submitted event."""
    _publish_event('academy.exam_submitted', {
        'attempt_id': attempt_id,
        'student_id': student_id,
        'exam_id': exam_id,
        'course_id': course_id,
        'percentage': percentage,
        'passed': passed,
    })


def publish_commission_accrued(
    commission_id: str,
    affiliate_id: str,
    commission_cents: int
) -> None:
    """Publish commission accrued event."""
    _publish_event('academy.commission_accrued', {
        'commission_id': commission_id,
        'affiliate_id': affiliate_id,
        'commission_cents': commission_cents,
    })


def publish_payout_requested(
    payout_id: str,
    affiliate_id: str,
    amount_cents: int,
    payment_method: str
) -> None:
    """
    Publish payout requested event.

    Picked up by whoever moves the money (admin tooling or a payment
    provider integration).
    """
    _publish_event('academy.payout_requested', {
        'payout_id': payout_id,
        'affiliate_id': affiliate_id,
        'amount_cents': amount_cents,
        'payment_method': payment_method,
    })
