# services/academy-service/src/apps/core/models/payout.py
"""
Payout Models
"""


from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin

from .affiliate import Affiliate


class PayoutStatus(models.TextChoices):
    """Payout status choices."""
    PENDING = 'pending', 'Pending'
    PROCESSING = 'processing', 'Processing'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'
    CANCELLED = 'cancelled', 'Cancelled'


OPEN_PAYOUT_STATUSES = (PayoutStatus.PENDING, PayoutStatus.PROCESSING)


class PaymentMethod(models.TextChoices):
    """Payout payment method choices."""
    PAYPAL = 'paypal', 'PayPal'
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'


class Payout(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Payout request of an affiliate.

    The requested amount is moved from pending to paid balance when the
    payout is created and moved back if the payout fails.
    """

    affiliate = models.ForeignKey(
        Affiliate,
        on_delete=models.PROTECT,
        related_name='payouts'
    )
    amount_cents = models.PositiveBigIntegerField()
    currency = models.CharField(max_length=3, default='USD')
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.PAYPAL
    )
    payment_details = models.JSONField(default=dict, blank=True)
    # Example: {"paypal_email": "affiliate@example.com"}

    status = models.CharField(
        max_length=20,
        choices=PayoutStatus.choices,
        default=PayoutStatus.PENDING,
        db_index=True
    )
    failure_reason = models.TextField(blank=True, default='')
    external_reference = models.CharField(max_length=255, blank=True, default='')
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'affiliate_payouts'
        ordering = ['-created_at']

    def __str__(self):
        return f"Payout {self.amount_cents} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_PAYOUT_STATUSES
