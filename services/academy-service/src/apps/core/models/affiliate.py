# services/academy-service/src/apps/core/models/affiliate.py
"""
Affiliate Models

Affiliate accounts, their referrals and referral-link clicks.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class Affiliate(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Affiliate account of a student.

    Balances are integer cents. total_earnings_cents always equals
    pending_balance_cents + paid_balance_cents; every balance change is
    applied as a single guarded UPDATE by the services.
    """

    student_id = models.UUIDField(unique=True)
    referral_code = models.CharField(max_length=50, unique=True)
    is_active = models.BooleanField(default=True, db_index=True)

    # Balances (cents)
    pending_balance_cents = models.PositiveBigIntegerField(default=0)
    paid_balance_cents = models.PositiveBigIntegerField(default=0)
    total_earnings_cents = models.PositiveBigIntegerField(default=0)

    # Counters
    referral_count = models.PositiveIntegerField(default=0)
    link_clicks = models.PositiveIntegerField(default=0)

    # Payout destination
    paypal_email = models.EmailField(null=True, blank=True)

    class Meta:
        db_table = 'affiliates'
        ordering = ['-created_at']

    def __str__(self):
        return f"Affiliate {self.referral_code}"

    @property
    def conversion_rate(self) -> Decimal:
        """Referrals per link click, as a percentage. Zero without clicks."""
        if not self.link_clicks:
            return Decimal('0.00')
        rate = Decimal(self.referral_count) * 100 / Decimal(self.link_clicks)
        return rate.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    @property
    def has_payout_destination(self) -> bool:
        return bool(self.paypal_email)


class ReferralStatus(models.TextChoices):
    """Referral status choices."""
    PENDING = 'pending', 'Pending'
    CONVERTED = 'converted', 'Converted'
    CHURNED = 'churned', 'Churned'


class Referral(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A student who registered through an affiliate's referral code.

    The referral converts with the first commission earned on it.
    """

    affiliate = models.ForeignKey(
        Affiliate,
        on_delete=models.CASCADE,
        related_name='referrals'
    )
    referred_student_id = models.UUIDField(unique=True)
    status = models.CharField(
        max_length=20,
        choices=ReferralStatus.choices,
        default=ReferralStatus.PENDING
    )
    converted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'affiliate_referrals'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.affiliate.referral_code} -> {self.referred_student_id}"


class AffiliateLinkClick(UUIDPrimaryKeyMixin):
    """Single visit to an affiliate's referral link."""

    affiliate = models.ForeignKey(
        Affiliate,
        on_delete=models.CASCADE,
        related_name='link_click_records'
    )
    referral_code = models.CharField(max_length=50)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'affiliate_link_clicks'
        ordering = ['-created_at']
