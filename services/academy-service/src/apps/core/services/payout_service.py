# services/academy-service/src/apps/core/services/payout_service.py
"""
Payout Service

Business logic for affiliate payout requests and their outcomes.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..models import (
    Affiliate,
    Commission,
    CommissionStatus,
    Payout,
    PayoutStatus,
    PaymentMethod,
    OPEN_PAYOUT_STATUSES,
)
from .exceptions import (
    AcademyValidationError,
    AffiliateInactiveError,
    AffiliateNotFoundError,
    BelowMinimumPayoutError,
    InsufficientBalanceError,
    InvalidTransitionError,
    PayoutAlreadyPendingError,
    PayoutDestinationMissingError,
    PayoutNotFoundError,
)

logger = logging.getLogger(__name__)


class PayoutService:
    """Service for requesting and settling affiliate payouts."""

    @staticmethod
    def get_minimum_payout_cents() -> int:
        return int(settings.AFFILIATE_MIN_PAYOUT_CENTS)

    # =========================================================================
    # REQUEST
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def request_payout(affiliate_id: str, payment_method: str = PaymentMethod.PAYPAL) -> Payout:
        """
        Request a payout of the affiliate's whole pending balance.

        The affiliate row is locked and the balance is moved from pending to
        paid with an UPDATE guarded on the pending balance, so concurrent
        requests cannot both claim the same money.

        Args:
            affiliate_id: Affiliate ID
            payment_method: paypal or bank_transfer

        Returns:
            Created payout in pending status

        Raises:
            PayoutDestinationMissingError: No payout destination configured
            BelowMinimumPayoutError: Pending balance under the minimum
            PayoutAlreadyPendingError: Another payout is still open
            InsufficientBalanceError: Balance changed under the request
        """
        if payment_method not in PaymentMethod.values:
            raise AcademyValidationError(
                f"Invalid payment method: {payment_method}",
                field="payment_method",
                details={"allowed": list(PaymentMethod.values)}
            )

        try:
            affiliate = Affiliate.objects.select_for_update().get(id=affiliate_id)
        except Affiliate.DoesNotExist:
            raise AffiliateNotFoundError(affiliate_id)

        if not affiliate.has_payout_destination:
            raise PayoutDestinationMissingError()

        if not affiliate.is_active:
            raise AffiliateInactiveError(affiliate.id)

        amount = affiliate.pending_balance_cents
        minimum = PayoutService.get_minimum_payout_cents()
        if amount < minimum:
            raise BelowMinimumPayoutError(amount, minimum)

        open_payout = Payout.objects.filter(
            affiliate=affiliate,
            status__in=OPEN_PAYOUT_STATUSES
        ).first()
        if open_payout:
            raise PayoutAlreadyPendingError(open_payout.id)

        claimed = Affiliate.objects.filter(
            id=affiliate.id,
            pending_balance_cents__gte=amount,
        ).update(
            pending_balance_cents=F('pending_balance_cents') - amount,
            paid_balance_cents=F('paid_balance_cents') + amount,
            updated_at=timezone.now(),
        )
        if not claimed:
            raise InsufficientBalanceError(amount)

        payout = Payout.objects.create(
            affiliate=affiliate,
            amount_cents=amount,
            currency=settings.AFFILIATE_PAYOUT_CURRENCY,
            payment_method=payment_method,
            payment_details={'paypal_email': affiliate.paypal_email},
            status=PayoutStatus.PENDING,
        )

        attached = Commission.objects.filter(
            affiliate=affiliate,
            status__in=[CommissionStatus.PENDING, CommissionStatus.APPROVED],
            payout__isnull=True,
        ).update(payout=payout, updated_at=timezone.now())

        logger.info(
            f"Payout {payout.id} requested for {amount} cents",
            extra={
                'affiliate_id': str(affiliate.id),
                'payment_method': payment_method,
                'commission_count': attached,
            }
        )

        from ..events.publishers import publish_payout_requested
        publish_payout_requested(
            payout_id=str(payout.id),
            affiliate_id=str(affiliate.id),
            amount_cents=amount,
            payment_method=payment_method,
        )

        return payout

    # =========================================================================
    # OUTCOMES
    # =========================================================================

    @staticmethod
    def _lock_payout(payout_id: str) -> Payout:
        try:
            return Payout.objects.select_for_update().get(id=payout_id)
        except Payout.DoesNotExist:
            raise PayoutNotFoundError(payout_id)

    @staticmethod
    @transaction.atomic
    def mark_processing(payout_id: str, external_reference: str = '') -> Payout:
        """Record that money movement for a payout has started."""
        payout = PayoutService._lock_payout(payout_id)

        if payout.status != PayoutStatus.PENDING:
            raise InvalidTransitionError('payout', payout.status, PayoutStatus.PROCESSING)

        payout.status = PayoutStatus.PROCESSING
        if external_reference:
            payout.external_reference = external_reference
        payout.save(update_fields=['status', 'external_reference', 'updated_at'])

        logger.info(f"Payout {payout.id} processing")

        return payout

    @staticmethod
    @transaction.atomic
    def complete_payout(payout_id: str, external_reference: str = '') -> Payout:
        """Complete a payout and mark the commissions it covered as paid."""
        payout = PayoutService._lock_payout(payout_id)

        if payout.status == PayoutStatus.COMPLETED:
            return payout

        if not payout.is_open:
            raise InvalidTransitionError('payout', payout.status, PayoutStatus.COMPLETED)

        now = timezone.now()
        payout.status = PayoutStatus.COMPLETED
        payout.processed_at = now
        if external_reference:
            payout.external_reference = external_reference
        payout.save(update_fields=['status', 'processed_at', 'external_reference', 'updated_at'])

        paid = Commission.objects.filter(
            payout=payout,
            status__in=[CommissionStatus.PENDING, CommissionStatus.APPROVED],
        ).update(status=CommissionStatus.PAID, paid_at=now, updated_at=now)

        logger.info(
            f"Payout {payout.id} completed",
            extra={'affiliate_id': str(payout.affiliate_id), 'commission_count': paid}
        )

        return payout

    @staticmethod
    @transaction.atomic
    def fail_payout(payout_id: str, reason: str = '', cancelled: bool = False) -> Payout:
        """
        Fail or cancel an open payout.

        The payout amount moves back from paid to pending balance and the
        covered commissions are released for the next request.
        """
        payout = PayoutService._lock_payout(payout_id)
        target = PayoutStatus.CANCELLED if cancelled else PayoutStatus.FAILED

        if not payout.is_open:
            raise InvalidTransitionError('payout', payout.status, target)

        Affiliate.objects.select_for_update().get(id=payout.affiliate_id)
        restored = Affiliate.objects.filter(
            id=payout.affiliate_id,
            paid_balance_cents__gte=payout.amount_cents,
        ).update(
            pending_balance_cents=F('pending_balance_cents') + payout.amount_cents,
            paid_balance_cents=F('paid_balance_cents') - payout.amount_cents,
            updated_at=timezone.now(),
        )
        if not restored:
            raise InsufficientBalanceError(payout.amount_cents)

        now = timezone.now()
        payout.status = target
        payout.failure_reason = reason or ''
        payout.processed_at = now
        payout.save(update_fields=['status', 'failure_reason', 'processed_at', 'updated_at'])

        Commission.objects.filter(payout=payout).update(payout=None, updated_at=now)

        logger.warning(
            f"Payout {payout.id} {target}: {reason}",
            extra={'affiliate_id': str(payout.affiliate_id), 'amount_cents': payout.amount_cents}
        )

        return payout
