# services/academy-service/src/apps/core/services/affiliate_service.py
"""
Affiliate Service

Business logic for the affiliate program: enrollment, referral links,
referral attribution and the affiliate dashboard.
"""

import logging
import re
import uuid
from datetime import timedelta
from typing import Dict, Any, Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, F
from django.db.models.functions import TruncDate
from django.utils import timezone

from ..models import (
    Affiliate,
    AffiliateLinkClick,
    Commission,
    Payout,
    Referral,
    ReferralStatus,
)
from .exceptions import (
    AcademyValidationError,
    AffiliateNotFoundError,
    AlreadyAffiliateError,
)

logger = logging.getLogger(__name__)

REFERRAL_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_-]{3,50}$')
DASHBOARD_CLICK_DAYS = 30
DASHBOARD_RECENT_COMMISSIONS = 10
DASHBOARD_RECENT_PAYOUTS = 5


class AffiliateService:
    """Service for managing affiliates and referral tracking."""

    # =========================================================================
    # LOOKUP
    # =========================================================================

    @staticmethod
    def get_for_student(student_id: str) -> Affiliate:
        try:
            return Affiliate.objects.get(student_id=student_id)
        except Affiliate.DoesNotExist:
            raise AffiliateNotFoundError(student_id)

    @staticmethod
    def get_by_code(referral_code: str, active_only: bool = True) -> Affiliate:
        filters = {'referral_code': referral_code}
        if active_only:
            filters['is_active'] = True

        try:
            return Affiliate.objects.get(**filters)
        except Affiliate.DoesNotExist:
            raise AffiliateNotFoundError(referral_code)

    # =========================================================================
    # ENROLLMENT
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def join_program(
        student_id: str,
        referral_code: str = None,
        paypal_email: str = None,
    ) -> Affiliate:
        """
        Enroll a student in the affiliate program.

        Args:
            student_id: Student ID
            referral_code: Desired referral code, generated when omitted
            paypal_email: Optional payout destination

        Raises:
            AlreadyAffiliateError: If the student is already an affiliate
            AcademyValidationError: If the referral code is malformed or taken
        """
        if Affiliate.objects.filter(student_id=student_id).exists():
            raise AlreadyAffiliateError(student_id)

        if referral_code:
            if not REFERRAL_CODE_PATTERN.match(referral_code):
                raise AcademyValidationError(
                    "Referral code may only contain letters, digits, '-' and '_' (3-50 characters)",
                    field="referral_code"
                )
        else:
            referral_code = uuid.uuid4().hex[:8].upper()

        try:
            with transaction.atomic():
                affiliate = Affiliate.objects.create(
                    student_id=student_id,
                    referral_code=referral_code,
                    paypal_email=paypal_email or None,
                )
        except IntegrityError:
            raise AcademyValidationError(
                f"Referral code already in use: {referral_code}",
                field="referral_code",
                code="REFERRAL_CODE_TAKEN"
            )

        logger.info(f"Student {student_id} joined the affiliate program as {referral_code}")

        return affiliate

    @staticmethod
    def update_payout_destination(student_id: str, paypal_email: Optional[str]) -> Affiliate:
        """Set or clear the PayPal email payouts are sent to."""
        affiliate = AffiliateService.get_for_student(student_id)
        affiliate.paypal_email = paypal_email or None
        affiliate.save(update_fields=['paypal_email', 'updated_at'])

        logger.info(f"Updated payout destination of affiliate {affiliate.id}")

        return affiliate

    @staticmethod
    def deactivate(student_id: str) -> bool:
        """
        Deactivate the affiliate account of a student.

        Returns:
            True if an active affiliate was deactivated
        """
        updated = Affiliate.objects.filter(
            student_id=student_id,
            is_active=True
        ).update(is_active=False, updated_at=timezone.now())

        if updated:
            logger.info(f"Deactivated affiliate of student {student_id}")

        return bool(updated)

    @staticmethod
    def mark_referral_churned(referred_student_id: str) -> bool:
        """
        Mark a converted referral as churned when the referred student
        cancels. Counters and earned commissions are left untouched.
        """
        updated = Referral.objects.filter(
            referred_student_id=referred_student_id,
            status=ReferralStatus.CONVERTED
        ).update(status=ReferralStatus.CHURNED, updated_at=timezone.now())

        return bool(updated)

    # =========================================================================
    # REFERRAL TRACKING
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def record_link_click(
        referral_code: str,
        ip_address: str = None,
        user_agent: str = '',
    ) -> Affiliate:
        """
        Record a visit to an active affiliate's referral link.

        Raises:
            AffiliateNotFoundError: If the code is unknown or inactive
        """
        affiliate = AffiliateService.get_by_code(referral_code)

        AffiliateLinkClick.objects.create(
            affiliate=affiliate,
            referral_code=affiliate.referral_code,
            ip_address=ip_address or None,
            user_agent=(user_agent or '')[:500],
        )
        Affiliate.objects.filter(id=affiliate.id).update(link_clicks=F('link_clicks') + 1)

        return affiliate

    @staticmethod
    @transaction.atomic
    def register_referral(referral_code: str, referred_student_id: str) -> Optional[Referral]:
        """
        Attribute a newly registered student to an affiliate.

        Idempotent: a student is attributed to at most one affiliate and
        the first attribution wins. Self-referrals are ignored.

        Returns:
            Referral, or None when the code is unknown or inactive
        """
        try:
            affiliate = AffiliateService.get_by_code(referral_code)
        except AffiliateNotFoundError:
            logger.warning(f"Ignoring referral with unknown code: {referral_code}")
            return None

        if str(affiliate.student_id) == str(referred_student_id):
            logger.warning(f"Ignoring self-referral of student {referred_student_id}")
            return None

        referral, created = Referral.objects.get_or_create(
            referred_student_id=referred_student_id,
            defaults={'affiliate': affiliate}
        )

        if created:
            logger.info(
                f"Registered referral of student {referred_student_id}",
                extra={'affiliate_id': str(affiliate.id)}
            )

        return referral

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    @staticmethod
    def get_dashboard(student_id: str) -> Dict[str, Any]:
        """
        Affiliate dashboard: balances, recent activity and clicks per day.
        """
        affiliate = AffiliateService.get_for_student(student_id)
        since = timezone.now() - timedelta(days=DASHBOARD_CLICK_DAYS)

        clicks = (
            AffiliateLinkClick.objects
            .filter(affiliate=affiliate, created_at__gte=since)
            .annotate(day=TruncDate('created_at'))
            .values('day')
            .annotate(count=Count('id'))
            .order_by('day')
        )

        return {
            'affiliate': affiliate,
            'recent_commissions': list(
                Commission.objects.filter(affiliate=affiliate)
                .order_by('-created_at')[:DASHBOARD_RECENT_COMMISSIONS]
            ),
            'recent_payouts': list(
                Payout.objects.filter(affiliate=affiliate)
                .order_by('-created_at')[:DASHBOARD_RECENT_PAYOUTS]
            ),
            'clicks_by_day': [
                {'date': row['day'].isoformat(), 'count': row['count']}
                for row in clicks
            ],
        }
