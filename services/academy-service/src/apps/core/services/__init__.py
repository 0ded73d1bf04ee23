# services/academy-service/src/apps/core/services/__init__.py
"""
Academy Service Business Logic

Service layer for course progress, final exams and the affiliate program.
"""

from .progress_service import ProgressService
from .eligibility_service import ExamEligibilityService, EligibilityReason
from .attempt_service import ExamAttemptService, calculate_percentage
from .exam_authoring_service import ExamAuthoringService
from .affiliate_service import AffiliateService
from .commission_service import CommissionService
from .payout_service import PayoutService

__all__ = [
    'ProgressService',
    'ExamEligibilityService',
    'EligibilityReason',
    'ExamAttemptService',
    'calculate_percentage',
    'ExamAuthoringService',
    'AffiliateService',
    'CommissionService',
    'PayoutService',
]
