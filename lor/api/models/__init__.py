"""
API Models
Pydantic models for request/response validation.
"""

from .reviews import (
    DeleteReviewResponse,
    ReceiptInfoResponse,
    ReviewContentResponse,
    StoreResponse,
    SubmitReviewResponse,
)

__all__ = [
    "DeleteReviewResponse",
    "ReceiptInfoResponse",
    "ReviewContentResponse",
    "StoreResponse",
    "SubmitReviewResponse",
]
