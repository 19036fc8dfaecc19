"""
Review Errors
Typed outcomes for every way a review operation can stop.

Domain rejections (ReviewRejectedError) are expected, user-facing results.
Server faults (ServerFaultError) mean storage misbehaved and are logged as errors.
"""

from enum import Enum
from typing import Optional


class RejectionReason(str, Enum):
    """Reason codes surfaced to callers."""

    MEMBER_NOT_FOUND = "MemberNotFound"
    RECEIPT_INVALID = "ReceiptInvalid"
    UNSUPPORTED_AREA = "UnsupportedArea"
    STORE_CREATION_FAILED = "StoreCreationFailed"
    DUPLICATE_REVIEW = "DuplicateReview"
    NOT_FOUND = "NotFound"
    REVIEW_PERSISTENCE_FAILED = "ReviewPersistenceFailed"


class LORError(Exception):
    """Base exception for review operations."""

    reason: RejectionReason
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ReviewRejectedError(LORError):
    """A submission or lookup was refused for a domain reason."""

    status_code = 400


class ServerFaultError(LORError):
    """Storage failed in a way the caller cannot fix."""

    status_code = 500


class MemberNotFoundError(ReviewRejectedError):
    reason = RejectionReason.MEMBER_NOT_FOUND
    status_code = 404

    def __init__(self, member_id: int):
        super().__init__(f"Member not found: {member_id}", details={"member_id": member_id})


class ReceiptInvalidError(ReviewRejectedError):
    reason = RejectionReason.RECEIPT_INVALID
    status_code = 422

    def __init__(self, failure_reason: str):
        super().__init__(
            "Receipt could not be verified", details={"failure_reason": failure_reason}
        )


class UnsupportedAreaError(ReviewRejectedError):
    reason = RejectionReason.UNSUPPORTED_AREA
    status_code = 422

    def __init__(self, address: str, city: str):
        super().__init__(
            "Store is outside the supported service area",
            details={"address": address, "city": city},
        )


class DuplicateReviewError(ReviewRejectedError):
    reason = RejectionReason.DUPLICATE_REVIEW
    status_code = 409

    def __init__(self, member_id: int, store_id: int, season: str):
        super().__init__(
            "Member already reviewed this store this season",
            details={"member_id": member_id, "store_id": store_id, "season": season},
        )


class ReviewNotFoundError(ReviewRejectedError):
    reason = RejectionReason.NOT_FOUND
    status_code = 404

    def __init__(self, review_id: int):
        super().__init__(f"Review not found: {review_id}", details={"review_id": review_id})


class StoreCreationError(ServerFaultError):
    reason = RejectionReason.STORE_CREATION_FAILED
    status_code = 503

    def __init__(self, name: str, address: str, error: str):
        super().__init__(
            "Failed to register store",
            details={"name": name, "address": address, "error": error},
        )


class ReviewPersistenceError(ServerFaultError):
    reason = RejectionReason.REVIEW_PERSISTENCE_FAILED

    def __init__(self, error: str):
        super().__init__("Failed to save review", details={"error": error})
