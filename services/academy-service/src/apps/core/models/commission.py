# services/academy-service/src/apps/core/models/commission.py
"""
Commission Models
"""

from decimal import Decimal

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin

from .affiliate import Affiliate


class CommissionStatus(models.TextChoices):
    """Commission status choices."""
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    PAID = 'paid', 'Paid'
    CANCELLED = 'cancelled', 'Cancelled'


class Commission(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Commission earned by an affiliate on a referred student's payment.

    commission_cents is floor(subscription_amount_cents * commission_rate).
    """

    affiliate = models.ForeignKey(
        Affiliate,
        on_delete=models.PROTECT,
        related_name='commissions'
    )
    referred_student_id = models.UUIDField(db_index=True)

    subscription_amount_cents = models.PositiveBigIntegerField()
    commission_rate = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal('0.80')
    )
    commission_cents = models.PositiveBigIntegerField()

    status = models.CharField(
        max_length=20,
        choices=CommissionStatus.choices,
        default=CommissionStatus.PENDING,
        db_index=True
    )

    # Settlement payment of the referred student (e.g. provider charge id)
    payment_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True
    )
    payout = models.ForeignKey(
        'Payout',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='commissions'
    )

    approved_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'affiliate_commissions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['affiliate', 'status']),
        ]

    def __str__(self):
        return f"{self.affiliate.referral_code}: {self.commission_cents} ({self.status})"

    @property
    def is_settled(self) -> bool:
        return self.status in (CommissionStatus.PAID, CommissionStatus.CANCELLED)
