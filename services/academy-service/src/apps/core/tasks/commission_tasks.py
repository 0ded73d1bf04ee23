# services/academy-service/src/apps/core/tasks/commission_tasks.py
"""
Commission Celery Tasks

Background tasks for commission lifecycle and balance checks.
"""

import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name='academy.approve_matured_commissions')
def approve_matured_commissions(hold_days=None):
    """
    Approve pending commissions whose hold period has passed.

    Runs hourly. The hold period covers the refund window of the
    underlying payment.
    """
    from ..services import CommissionService

    count = CommissionService.approve_matured_commissions(hold_days=hold_days)

    return {'count': count}


@shared_task(name='academy.reconcile_affiliate_balances')
def reconcile_affiliate_balances():
    """
    Report affiliates whose lifetime earnings differ from pending + paid.

    Runs daily as a consistency check; mismatches are logged, not fixed.
    """
    from ..models import Affiliate
    from django.db.models import F

    mismatched = Affiliate.objects.exclude(
        total_earnings_cents=F('pending_balance_cents') + F('paid_balance_cents')
    )

    count = 0
    for affiliate in mismatched:
        logger.error(
            f"Affiliate {affiliate.id} balance mismatch",
            extra={
                'pending_balance_cents': affiliate.pending_balance_cents,
                'paid_balance_cents': affiliate.paid_balance_cents,
                'total_earnings_cents': affiliate.total_earnings_cents,
            }
        )
        count += 1

    logger.info(f"Found {count} affiliates with balance mismatches")

    return {'count': count}
