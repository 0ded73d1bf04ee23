"""
Academy Service Celery Tasks

Background tasks for affiliate bookkeeping.
"""

from .commission_tasks import (
    approve_matured_commissions,
    reconcile_affiliate_balances,
)

__all__ = [
    'approve_matured_commissions',
    'reconcile_affiliate_balances',
]
