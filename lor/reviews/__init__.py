"""
Reviews Module
Receipt-verified review admission and lifecycle.
"""

from .duplicates import DuplicateCheck, DuplicateGuard
from .errors import (
    DuplicateReviewError,
    LORError,
    MemberNotFoundError,
    ReceiptInvalidError,
    RejectionReason,
    ReviewNotFoundError,
    ReviewPersistenceError,
    ReviewRejectedError,
    ServerFaultError,
    StoreCreationError,
    UnsupportedAreaError,
)
from .geo import City, GeoBoundaryChecker, SUPPORTED_CITIES, extract_city
from .models import ReceiptInfo, ReviewContent
from .receipt import (
    ClovaReceiptClient,
    ReceiptRecognizer,
    ReceiptResult,
    ReceiptVerifier,
    RecognitionError,
    RecognitionResponse,
    RecognitionTimeout,
)
from .season import Season, current_season
from .service import ReviewAdmissionService
from .stores import StoreResolver, normalize

__all__ = [
    "City",
    "ClovaReceiptClient",
    "DuplicateCheck",
    "DuplicateGuard",
    "DuplicateReviewError",
    "GeoBoundaryChecker",
    "LORError",
    "MemberNotFoundError",
    "ReceiptInfo",
    "ReceiptInvalidError",
    "ReceiptRecognizer",
    "ReceiptResult",
    "ReceiptVerifier",
    "RecognitionError",
    "RecognitionResponse",
    "RecognitionTimeout",
    "RejectionReason",
    "ReviewAdmissionService",
    "ReviewContent",
    "ReviewNotFoundError",
    "ReviewPersistenceError",
    "ReviewRejectedError",
    "SUPPORTED_CITIES",
    "Season",
    "ServerFaultError",
    "StoreCreationError",
    "StoreResolver",
    "UnsupportedAreaError",
    "current_season",
    "extract_city",
    "normalize",
]
