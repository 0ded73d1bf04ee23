# services/academy-service/src/apps/core/api/views/affiliate_views.py
"""
Affiliate Views

Affiliate dashboard, enrollment, payouts and referral-link tracking.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from shared.common.middleware import get_client_ip
from shared.common.permissions import HasActiveSubscription

from ...models import Commission, Payout
from ...services import AffiliateService, PayoutService
from ..serializers import (
    AffiliateSerializer,
    AffiliateDashboardSerializer,
    JoinProgramSerializer,
    PayoutDestinationSerializer,
    CommissionSerializer,
    PayoutSerializer,
    PayoutRequestSerializer,
)
from .base import StudentContextMixin, success_response


class AffiliateView(StudentContextMixin, APIView):
    """
    The current student's affiliate account.

    GET returns the dashboard, POST joins the program and PATCH updates
    the payout destination.
    """

    permission_classes = [HasActiveSubscription]

    @extend_schema(responses={200: AffiliateDashboardSerializer})
    def get(self, request):
        dashboard = AffiliateService.get_dashboard(self.get_student_id())
        return success_response(AffiliateDashboardSerializer(dashboard).data)

    @extend_schema(request=JoinProgramSerializer, responses={201: AffiliateSerializer})
    def post(self, request):
        serializer = JoinProgramSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        affiliate = AffiliateService.join_program(
            student_id=self.get_student_id(),
            referral_code=serializer.validated_data.get('referral_code') or None,
            paypal_email=serializer.validated_data.get('paypal_email') or None,
        )

        return success_response(
            AffiliateSerializer(affiliate).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(request=PayoutDestinationSerializer, responses={200: AffiliateSerializer})
    def patch(self, request):
        serializer = PayoutDestinationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        affiliate = AffiliateService.update_payout_destination(
            student_id=self.get_student_id(),
            paypal_email=serializer.validated_data.get('paypal_email'),
        )

        return success_response(AffiliateSerializer(affiliate).data)


class AffiliatePayoutRequestView(StudentContextMixin, APIView):
    """Request a payout of the whole pending balance."""

    permission_classes = [HasActiveSubscription]

    @extend_schema(request=PayoutRequestSerializer, responses={201: PayoutSerializer})
    def post(self, request):
        serializer = PayoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        affiliate = AffiliateService.get_for_student(self.get_student_id())
        payout = PayoutService.request_payout(
            affiliate_id=affiliate.id,
            payment_method=serializer.validated_data['payment_method'],
        )

        return success_response(
            PayoutSerializer(payout).data,
            status=status.HTTP_201_CREATED
        )


class AffiliateCommissionListView(StudentContextMixin, generics.ListAPIView):
    """Paginated commissions of the current affiliate."""

    permission_classes = [HasActiveSubscription]
    serializer_class = CommissionSerializer
    filterset_fields = ['status']
    ordering_fields = ['created_at', 'commission_cents']

    def get_queryset(self):
        affiliate = AffiliateService.get_for_student(self.get_student_id())
        return Commission.objects.filter(affiliate=affiliate).order_by('-created_at')


class AffiliatePayoutListView(StudentContextMixin, generics.ListAPIView):
    """Paginated payouts of the current affiliate."""

    permission_classes = [HasActiveSubscription]
    serializer_class = PayoutSerializer
    filterset_fields = ['status']
    ordering_fields = ['created_at', 'amount_cents']

    def get_queryset(self):
        affiliate = AffiliateService.get_for_student(self.get_student_id())
        return Payout.objects.filter(affiliate=affiliate).order_by('-created_at')


class ReferralClickView(APIView):
    """Record a visit to a referral link. Anonymous."""

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(request=None, responses={201: None})
    def post(self, request, referral_code):
        affiliate = AffiliateService.record_link_click(
            referral_code=referral_code,
            ip_address=get_client_ip(request) or None,
            user_agent=request.headers.get('User-Agent', ''),
        )
        return success_response(
            referral_code=affiliate.referral_code,
            status=status.HTTP_201_CREATED
        )
