"""
Academy Service Views
"""

from .course_views import CourseViewSet
from .attempt_views import ExamAttemptViewSet
from .affiliate_views import (
    AffiliateView,
    AffiliatePayoutRequestView,
    AffiliateCommissionListView,
    AffiliatePayoutListView,
    ReferralClickView,
)
from .internal_views import InternalEventView

__all__ = [
    'CourseViewSet',
    'ExamAttemptViewSet',
    'AffiliateView',
    'AffiliatePayoutRequestView',
    'AffiliateCommissionListView',
    'AffiliatePayoutListView',
    'ReferralClickView',
    'InternalEventView',
]
