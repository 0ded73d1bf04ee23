"""
Academy Service Models

Database models for course progress, final exams and the affiliate program.
"""

from .course import Course, Chapter
from .progress import ChapterProgress
from .exam import Exam, ExamQuestion, OPTIONS_PER_QUESTION, DEFAULT_PASSING_PERCENTAGE
from .attempt import ExamAttempt
from .affiliate import Affiliate, AffiliateLinkClick, Referral, ReferralStatus
from .commission import Commission, CommissionStatus
from .payout import Payout, PayoutStatus, PaymentMethod, OPEN_PAYOUT_STATUSES

__all__ = [
    # Course
    'Course',
    'Chapter',
    'ChapterProgress',
    # Exam
    'Exam',
    'ExamQuestion',
    'ExamAttempt',
    'OPTIONS_PER_QUESTION',
    'DEFAULT_PASSING_PERCENTAGE',
    # Affiliate
    'Affiliate',
    'AffiliateLinkClick',
    'Referral',
    'ReferralStatus',
    'Commission',
    'CommissionStatus',
    'Payout',
    'PayoutStatus',
    'PaymentMethod',
    'OPEN_PAYOUT_STATUSES',
]
