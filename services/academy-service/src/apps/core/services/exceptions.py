# services/academy-service/src/apps/core/services/exceptions.py
"""
Academy Service Exceptions

Custom exceptions for exam and affiliate operations.
"""

from typing import Optional, Dict, Any


class AcademyServiceError(Exception):
    """Base exception for academy service errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: str = "ACADEMY_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# NOT FOUND
# =============================================================================

class NotFoundError(AcademyServiceError):
    """Raised when a requested resource does not exist."""

    status_code = 404

    def __init__(
        self,
        resource: str,
        resource_id: str = None,
        message: str = None,
        code: str = "NOT_FOUND",
    ):
        msg = message or f"{resource} not found: {resource_id}"
        super().__init__(
            message=msg,
            code=code,
            details={"resource": resource, "id": str(resource_id) if resource_id else None}
        )


class CourseNotFoundError(NotFoundError):
    """Raised when a course is unknown or unpublished."""

    def __init__(self, course_ref: str = None):
        super().__init__("Course", course_ref, code="COURSE_NOT_FOUND")


class ChapterNotFoundError(NotFoundError):
    """Raised when a chapter is unknown or belongs to another course."""

    def __init__(self, chapter_id: str = None):
        super().__init__("Chapter", chapter_id, code="CHAPTER_NOT_FOUND")


class ExamNotFoundError(NotFoundError):
    """Raised when an exam or exam question is unknown."""

    def __init__(self, exam_id: str = None, resource: str = "Exam"):
        super().__init__(resource, exam_id, code="EXAM_NOT_FOUND")


class AttemptNotFoundError(NotFoundError):
    """Raised when an attempt is unknown or belongs to another student."""

    def __init__(self, attempt_id: str = None):
        super().__init__("Exam attempt", attempt_id, code="ATTEMPT_NOT_FOUND")


class AffiliateNotFoundError(NotFoundError):
    """Raised when no affiliate matches the given student or referral code."""

    def __init__(self, reference: str = None):
        super().__init__("Affiliate", reference, code="AFFILIATE_NOT_FOUND")


class CommissionNotFoundError(NotFoundError):
    """Raised when a commission is unknown."""

    def __init__(self, commission_id: str = None):
        super().__init__("Commission", commission_id, code="COMMISSION_NOT_FOUND")


class PayoutNotFoundError(NotFoundError):
    """Raised when a payout is unknown."""

    def __init__(self, payout_id: str = None):
        super().__init__("Payout", payout_id, code="PAYOUT_NOT_FOUND")


# =============================================================================
# VALIDATION
# =============================================================================

class AcademyValidationError(AcademyServiceError):
    """Raised when input data validation fails."""

    def __init__(
        self,
        message: str,
        field: str = None,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=code,
            details=error_details
        )


class InvalidAnswersError(AcademyValidationError):
    """Raised when the submitted answers are not a question-to-option map."""

    def __init__(self, message: str = "Answers must be an object mapping question ids to option indexes"):
        super().__init__(message, field="answers", code="INVALID_ANSWERS")


class InvalidOptionIndexError(AcademyValidationError):
    """Raised when an option index is not an integer within 0..3."""

    def __init__(self, value: Any = None, field: str = "answers"):
        super().__init__(
            f"Option index must be an integer between 0 and 3, got {value!r}",
            field=field,
            code="INVALID_OPTION_INDEX",
            details={"value": repr(value)}
        )


class MissingRequiredFieldError(AcademyValidationError):
    """Raised when a required field is missing or blank."""

    def __init__(self, field: str, message: str = None):
        super().__init__(
            message or f"Field '{field}' is required",
            field=field,
            code="MISSING_REQUIRED_FIELD"
        )


class BelowMinimumPayoutError(AcademyValidationError):
    """Raised when the pending balance is under the payout minimum."""

    def __init__(self, balance_cents: int, minimum_cents: int):
        super().__init__(
            f"Minimum payout is {minimum_cents} cents, available balance is {balance_cents} cents",
            field="pending_balance_cents",
            code="BELOW_MINIMUM_PAYOUT",
            details={"balance_cents": balance_cents, "minimum_cents": minimum_cents}
        )


class PayoutDestinationMissingError(AcademyValidationError):
    """Raised when the affiliate has no payout destination configured."""

    def __init__(self):
        super().__init__(
            "Configure a payout destination before requesting a payout",
            field="paypal_email",
            code="PAYOUT_DESTINATION_MISSING"
        )


# =============================================================================
# STATE
# =============================================================================

class AcademyStateError(AcademyServiceError):
    """Raised when the current state of a resource forbids an operation."""

    status_code = 409

    def __init__(
        self,
        message: str,
        code: str = "INVALID_STATE",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=code, details=details)


class AffiliateInactiveError(AcademyStateError):
    """Raised when an operation requires an active affiliate."""

    def __init__(self, affiliate_id: str = None):
        super().__init__(
            "Affiliate account is not active",
            code="AFFILIATE_INACTIVE",
            details={"affiliate_id": str(affiliate_id) if affiliate_id else None}
        )


class AlreadyAffiliateError(AcademyStateError):
    """Raised when a student joins the program twice."""

    def __init__(self, student_id: str = None):
        super().__init__(
            "Student is already an affiliate",
            code="ALREADY_AFFILIATE",
            details={"student_id": str(student_id) if student_id else None}
        )


class AlreadySettledError(AcademyStateError):
    """Raised when a commission was already paid, cancelled or claimed by a payout."""

    def __init__(self, commission_id: str = None, status: str = None):
        super().__init__(
            "Commission is already settled",
            code="COMMISSION_ALREADY_SETTLED",
            details={"commission_id": str(commission_id) if commission_id else None, "status": status}
        )


class InsufficientBalanceError(AcademyStateError):
    """Raised when the pending balance no longer covers the payout."""

    def __init__(self, requested_cents: int, available_cents: int = None):
        super().__init__(
            "Insufficient pending balance for payout",
            code="INSUFFICIENT_BALANCE",
            details={"requested_cents": requested_cents, "available_cents": available_cents}
        )


class PayoutAlreadyPendingError(AcademyStateError):
    """Raised when the affiliate already has a payout in flight."""

    def __init__(self, payout_id: str = None):
        super().__init__(
            "A payout request is already pending",
            code="PAYOUT_ALREADY_PENDING",
            details={"payout_id": str(payout_id) if payout_id else None}
        )


class InvalidTransitionError(AcademyStateError):
    """Raised when a status transition is not allowed."""

    def __init__(self, resource: str, current_state: str, target_state: str):
        super().__init__(
            f"Cannot transition {resource} from {current_state} to {target_state}",
            code="INVALID_TRANSITION",
            details={"current_state": current_state, "target_state": target_state}
        )


class ExamHasNoQuestionsError(AcademyStateError):
    """Raised when enabling an exam that has no questions."""

    def __init__(self, exam_id: str = None):
        super().__init__(
            "Cannot enable an exam without questions",
            code="EXAM_HAS_NO_QUESTIONS",
            details={"exam_id": str(exam_id) if exam_id else None}
        )


class ExamAlreadyExistsError(AcademyStateError):
    """Raised when a course already has an exam."""

    def __init__(self, course_id: str = None):
        super().__init__(
            "Course already has an exam",
            code="EXAM_ALREADY_EXISTS",
            details={"course_id": str(course_id) if course_id else None}
        )


# =============================================================================
# PERMISSION
# =============================================================================

class ExamNotEligibleError(AcademyServiceError):
    """Raised when a student submits an exam they are not eligible for."""

    status_code = 403

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details["reason"] = reason
        super().__init__(
            message=f"Student is not eligible for this exam: {reason}",
            code="EXAM_NOT_ELIGIBLE",
            details=error_details
        )
