# services/academy-service/src/apps/core/api/urls.py
"""
Academy Service API URLs

URL routing configuration for REST API endpoints.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    CourseViewSet,
    ExamAttemptViewSet,
    AffiliateView,
    AffiliatePayoutRequestView,
    AffiliateCommissionListView,
    AffiliatePayoutListView,
    ReferralClickView,
    InternalEventView,
)

router = DefaultRouter()
router.register(r'courses', CourseViewSet, basename='course')
router.register(r'attempts', ExamAttemptViewSet, basename='attempt')

urlpatterns = [
    path('', include(router.urls)),
    path('affiliate/', AffiliateView.as_view(), name='affiliate'),
    path('affiliate/payout/', AffiliatePayoutRequestView.as_view(), name='affiliate-payout'),
    path('affiliate/commissions/', AffiliateCommissionListView.as_view(), name='affiliate-commissions'),
    path('affiliate/payouts/', AffiliatePayoutListView.as_view(), name='affiliate-payouts'),
    path('referrals/<str:referral_code>/click/', ReferralClickView.as_view(), name='referral-click'),
    path('internal/events/', InternalEventView.as_view(), name='internal-events'),
]

# API URL Patterns Summary:
#
# Courses:
#   GET         /api/v1/courses/{slug}/exam/
#   POST        /api/v1/courses/{slug}/exam/submit/
#   GET         /api/v1/courses/{slug}/exam/attempts/
#   GET/POST    /api/v1/courses/{slug}/progress/
#
# Attempts:
#   GET         /api/v1/attempts/{id}/
#
# Affiliate:
#   GET/POST/PATCH /api/v1/affiliate/
#   POST        /api/v1/affiliate/payout/
#   GET         /api/v1/affiliate/commissions/
#   GET         /api/v1/affiliate/payouts/
#   POST        /api/v1/referrals/{code}/click/
#
# Internal:
#   POST        /api/v1/internal/events/
