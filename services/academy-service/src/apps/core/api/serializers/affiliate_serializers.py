# services/academy-service/src/apps/core/api/serializers/affiliate_serializers.py
"""
Affiliate Serializers
"""

from rest_framework import serializers

from ...models import Affiliate, Commission, Payout, PaymentMethod


class AffiliateSerializer(serializers.ModelSerializer):
    """Serializer for the affiliate account."""

    conversion_rate = serializers.DecimalField(max_digits=7, decimal_places=2, read_only=True)

    class Meta:
        model = Affiliate
        fields = [
            'id',
            'referral_code',
            'is_active',
            'pending_balance_cents',
            'paid_balance_cents',
            'total_earnings_cents',
            'referral_count',
            'link_clicks',
            'conversion_rate',
            'paypal_email',
            'created_at',
        ]
        read_only_fields = fields


class JoinProgramSerializer(serializers.Serializer):
    """Serializer for joining the affiliate program."""

    referral_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    paypal_email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)


class PayoutDestinationSerializer(serializers.Serializer):
    """Serializer for updating the payout destination."""

    paypal_email = serializers.EmailField(allow_null=True, allow_blank=True)


class CommissionSerializer(serializers.ModelSerializer):
    """Serializer for commissions."""

    class Meta:
        model = Commission
        fields = [
            'id',
            'referred_student_id',
            'subscription_amount_cents',
            'commission_rate',
            'commission_cents',
            'status',
            'payout_id',
            'is_settled',
            'created_at',
            'approved_at',
            'paid_at',
            'cancelled_at',
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.ModelSerializer):
    """Serializer for payouts."""

    class Meta:
        model = Payout
        fields = [
            'id',
            'amount_cents',
            'currency',
            'payment_method',
            'status',
            'failure_reason',
            'created_at',
            'processed_at',
        ]
        read_only_fields = fields


class PayoutRequestSerializer(serializers.Serializer):
    """Serializer for payout requests."""

    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices,
        default=PaymentMethod.PAYPAL
    )


class ClicksByDaySerializer(serializers.Serializer):
    date = serializers.CharField()
    count = serializers.IntegerField()


class AffiliateDashboardSerializer(serializers.Serializer):
    """Serializer for the affiliate dashboard."""

    affiliate = AffiliateSerializer()
    recent_commissions = CommissionSerializer(many=True)
    recent_payouts = PayoutSerializer(many=True)
    clicks_by_day = ClicksByDaySerializer(many=True)


class InternalEventSerializer(serializers.Serializer):
    """Serializer for events relayed by other services."""

    event_type = serializers.CharField(max_length=100)
    data = serializers.DictField()
