"""
Academy Service Serializers
"""

from .exam_serializers import (
    ExamSubmitSerializer,
    ExamAttemptListSerializer,
    ExamAttemptResultSerializer,
)
from .progress_serializers import (
    ProgressUpdateSerializer,
    ChapterProgressSerializer,
)
from .affiliate_serializers import (
    AffiliateSerializer,
    AffiliateDashboardSerializer,
    JoinProgramSerializer,
    PayoutDestinationSerializer,
    CommissionSerializer,
    PayoutSerializer,
    PayoutRequestSerializer,
    InternalEventSerializer,
)

__all__ = [
    # Exam
    'ExamSubmitSerializer',
    'ExamAttemptListSerializer',
    'ExamAttemptResultSerializer',
    # Progress
    'ProgressUpdateSerializer',
    'ChapterProgressSerializer',
    # Affiliate
    'AffiliateSerializer',
    'AffiliateDashboardSerializer',
    'JoinProgramSerializer',
    'PayoutDestinationSerializer',
    'CommissionSerializer',
    'PayoutSerializer',
    'PayoutRequestSerializer',
    'InternalEventSerializer',
]
