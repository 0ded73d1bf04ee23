# services/academy-service/src/apps/core/services/commission_service.py
"""
Commission Service

Business logic for accruing, approving and cancelling affiliate commissions.
"""

import logging
from datetime import timedelta
from decimal import Decimal, ROUND_FLOOR
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..models import (
    Affiliate,
    Commission,
    CommissionStatus,
    Referral,
    ReferralStatus,
)
from .exceptions import (
    AcademyValidationError,
    AffiliateInactiveError,
    AffiliateNotFoundError,
    AlreadySettledError,
    CommissionNotFoundError,
    InvalidTransitionError,
)

logger = logging.getLogger(__name__)


class CommissionService:
    """Service for affiliate commission accrual."""

    @staticmethod
    def get_commission_rate() -> Decimal:
        return Decimal(str(settings.AFFILIATE_COMMISSION_RATE))

    @staticmethod
    def calculate_commission_cents(amount_cents: int, rate: Decimal = None) -> int:
        """Commission in cents, always rounded down."""
        rate = rate if rate is not None else CommissionService.get_commission_rate()
        value = Decimal(int(amount_cents)) * rate
        return int(value.to_integral_value(rounding=ROUND_FLOOR))

    # =========================================================================
    # ACCRUAL
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def accrue_commission(
        affiliate_id: str,
        referred_student_id: str,
        subscription_amount_cents: int,
        payment_reference: str = None,
    ) -> Commission:
        """
        Accrue a commission on a referred student's payment.

        Args:
            affiliate_id: Affiliate ID
            referred_student_id: Student whose payment earned the commission
            subscription_amount_cents: Settled payment amount in cents
            payment_reference: Provider reference of the payment. A second
                call with the same reference returns the existing commission.

        Returns:
            Pending commission

        Raises:
            AffiliateNotFoundError: If the affiliate does not exist
            AffiliateInactiveError: If the affiliate is not active
        """
        if subscription_amount_cents is None or int(subscription_amount_cents) < 0:
            raise AcademyValidationError(
                "Subscription amount must be a non-negative number of cents",
                field="subscription_amount_cents"
            )

        if payment_reference:
            existing = Commission.objects.filter(payment_reference=payment_reference).first()
            if existing:
                logger.info(f"Commission already accrued for payment {payment_reference}")
                return existing

        try:
            affiliate = Affiliate.objects.select_for_update().get(id=affiliate_id)
        except Affiliate.DoesNotExist:
            raise AffiliateNotFoundError(affiliate_id)

        if not affiliate.is_active:
            raise AffiliateInactiveError(affiliate.id)

        rate = CommissionService.get_commission_rate()
        commission_cents = CommissionService.calculate_commission_cents(
            subscription_amount_cents, rate
        )

        commission = Commission.objects.create(
            affiliate=affiliate,
            referred_student_id=referred_student_id,
            subscription_amount_cents=int(subscription_amount_cents),
            commission_rate=rate,
            commission_cents=commission_cents,
            status=CommissionStatus.PENDING,
            payment_reference=payment_reference or None,
        )

        converted = CommissionService._convert_referral(affiliate, referred_student_id)

        Affiliate.objects.filter(id=affiliate.id).update(
            pending_balance_cents=F('pending_balance_cents') + commission_cents,
            total_earnings_cents=F('total_earnings_cents') + commission_cents,
            referral_count=F('referral_count') + (1 if converted else 0),
            updated_at=timezone.now(),
        )

        logger.info(
            f"Accrued commission {commission.id} of {commission_cents} cents",
            extra={
                'affiliate_id': str(affiliate.id),
                'referred_student_id': str(referred_student_id),
                'subscription_amount_cents': int(subscription_amount_cents),
                'new_referral': converted,
            }
        )

        from ..events.publishers import publish_commission_accrued
        publish_commission_accrued(
            commission_id=str(commission.id),
            affiliate_id=str(affiliate.id),
            commission_cents=commission_cents,
        )

        return commission

    @staticmethod
    def _convert_referral(affiliate: Affiliate, referred_student_id: str) -> bool:
        """
        Mark the referral of a student as converted.

        Returns True only the first time the student converts for this
        affiliate, which is when referral_count grows.
        """
        referral = Referral.objects.filter(referred_student_id=referred_student_id).first()

        if referral is None:
            Referral.objects.create(
                affiliate=affiliate,
                referred_student_id=referred_student_id,
                status=ReferralStatus.CONVERTED,
                converted_at=timezone.now(),
            )
            return True

        if referral.affiliate_id != affiliate.id or referral.status == ReferralStatus.CONVERTED:
            return False

        # A churned student who pays again is re-activated but not recounted
        first_conversion = referral.status == ReferralStatus.PENDING

        referral.status = ReferralStatus.CONVERTED
        if first_conversion:
            referral.converted_at = timezone.now()
        referral.save(update_fields=['status', 'converted_at', 'updated_at'])
        return first_conversion

    @staticmethod
    def accrue_for_referred_student(
        referred_student_id: str,
        subscription_amount_cents: int,
        payment_reference: str = None,
    ) -> Optional[Commission]:
        """
        Accrue a commission for whoever referred the paying student.

        Returns:
            Commission, or None when the student was not referred
        """
        referral = Referral.objects.filter(referred_student_id=referred_student_id).first()
        if referral is None:
            logger.debug(f"Student {referred_student_id} was not referred, no commission")
            return None

        return CommissionService.accrue_commission(
            affiliate_id=referral.affiliate_id,
            referred_student_id=referred_student_id,
            subscription_amount_cents=subscription_amount_cents,
            payment_reference=payment_reference,
        )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def approve_commission(commission_id: str) -> Commission:
        """Approve a pending commission once its payment has settled."""
        try:
            commission = Commission.objects.select_for_update().get(id=commission_id)
        except Commission.DoesNotExist:
            raise CommissionNotFoundError(commission_id)

        if commission.status != CommissionStatus.PENDING:
            raise InvalidTransitionError('commission', commission.status, CommissionStatus.APPROVED)

        commission.status = CommissionStatus.APPROVED
        commission.approved_at = timezone.now()
        commission.save(update_fields=['status', 'approved_at', 'updated_at'])

        logger.info(f"Approved commission {commission.id}")

        return commission

    @staticmethod
    def approve_matured_commissions(hold_days: int = None) -> int:
        """
        Approve pending commissions older than the hold period.

        Returns:
            Number of commissions approved
        """
        if hold_days is None:
            hold_days = settings.AFFILIATE_COMMISSION_HOLD_DAYS

        now = timezone.now()
        cutoff = now - timedelta(days=hold_days)

        count = Commission.objects.filter(
            status=CommissionStatus.PENDING,
            created_at__lte=cutoff,
        ).update(
            status=CommissionStatus.APPROVED,
            approved_at=now,
            updated_at=now,
        )

        logger.info(f"Approved {count} matured commissions")

        return count

    @staticmethod
    @transaction.atomic
    def cancel_commission(commission_id: str, reason: str = None) -> Commission:
        """
        Cancel a pending commission and take it back out of the pending balance.

        The balance decrement is clamped so the pending balance never goes
        below zero. A commission already claimed by an open payout is
        detached from it; the payout amount itself is left as requested.

        Raises:
            AlreadySettledError: If the commission is not pending
        """
        try:
            commission = Commission.objects.select_for_update().get(id=commission_id)
        except Commission.DoesNotExist:
            raise CommissionNotFoundError(commission_id)

        if commission.status != CommissionStatus.PENDING:
            raise AlreadySettledError(commission.id, commission.status)

        affiliate = Affiliate.objects.select_for_update().get(id=commission.affiliate_id)
        deduction = min(commission.commission_cents, affiliate.pending_balance_cents)

        if deduction:
            Affiliate.objects.filter(
                id=affiliate.id,
                pending_balance_cents__gte=deduction,
            ).update(
                pending_balance_cents=F('pending_balance_cents') - deduction,
                total_earnings_cents=F('total_earnings_cents') - deduction,
                updated_at=timezone.now(),
            )

        detached_payout_id = commission.payout_id

        commission.status = CommissionStatus.CANCELLED
        commission.cancelled_at = timezone.now()
        commission.payout = None
        commission.save(update_fields=['status', 'cancelled_at', 'payout', 'updated_at'])

        logger.info(
            f"Cancelled commission {commission.id}",
            extra={
                'affiliate_id': str(affiliate.id),
                'deducted_cents': deduction,
                'detached_payout_id': str(detached_payout_id) if detached_payout_id else None,
                'reason': reason,
            }
        )

        return commission

    @staticmethod
    def cancel_for_payment(payment_reference: str, reason: str = None) -> Optional[Commission]:
        """Cancel the commission accrued on a refunded payment, if any."""
        commission = Commission.objects.filter(payment_reference=payment_reference).first()
        if commission is None:
            return None
        return CommissionService.cancel_commission(commission.id, reason=reason)

    # =========================================================================
    # REPORTING
    # =========================================================================

    @staticmethod
    def get_conversion_rate(affiliate_id: str) -> Decimal:
        """Referrals per link click as a percentage, zero without clicks."""
        try:
            affiliate = Affiliate.objects.get(id=affiliate_id)
        except Affiliate.DoesNotExist:
            raise AffiliateNotFoundError(affiliate_id)
        return affiliate.conversion_rate
