"""
Review Endpoints
POST /reviews - Submit a receipt-verified review.
GET /reviews - List reviews by member or store.
DELETE /reviews/{id} - Soft-delete a review.

Endpoints are plain functions so FastAPI runs them in its threadpool; the
recognition call and storage I/O never block the event loop.
"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ...reviews import ReviewAdmissionService, ReviewContent
from ..dependencies import get_request_id, get_review_service
from ..models.reviews import (
    DeleteReviewResponse,
    ReceiptInfoResponse,
    ReviewContentResponse,
    SubmitReviewResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["reviews"])


@router.post(
    "/reviews", response_model=SubmitReviewResponse, status_code=status.HTTP_201_CREATED
)
def submit_review(
    member_id: int = Form(..., description="Acting member ID"),
    content: str = Form(..., min_length=1, max_length=2000),
    rating: int = Form(..., ge=1, le=5),
    image: Optional[str] = Form(None, max_length=512),
    receipt: UploadFile = File(..., description="Photo of the receipt"),
    service: ReviewAdmissionService = Depends(get_review_service),
    request_id: str = Depends(get_request_id),
) -> SubmitReviewResponse:
    """
    Submit a review backed by a receipt photo.

    Workflow:
    1. Look up the member
    2. Verify the receipt with the recognition service
    3. Check the store is inside the service area
    4. Resolve or register the store
    5. Reject a second review of the store in the same season
    6. Save the review
    """
    start_time = time.time()

    logger.info(f"Review submission: member={member_id}", extra={"request_id": request_id})

    review = service.submit_review(
        member_id=member_id,
        image=receipt.file.read(),
        content=ReviewContent(content=content, rating=rating, image=image),
    )

    processing_time_ms = (time.time() - start_time) * 1000
    logger.info(
        f"Review admitted: id={review.id}, processing_time={processing_time_ms:.2f}ms",
        extra={"request_id": request_id},
    )

    return SubmitReviewResponse(review_id=review.id, store_id=review.store_id, season=review.season)


@router.post("/reviews/receipt", response_model=ReceiptInfoResponse)
def verify_receipt(
    receipt: UploadFile = File(..., description="Photo of the receipt"),
    service: ReviewAdmissionService = Depends(get_review_service),
) -> ReceiptInfoResponse:
    """Verify a receipt without submitting a review."""
    info = service.verify_receipt(receipt.file.read())
    return ReceiptInfoResponse(store_name=info.store_name, store_address=info.store_address)


@router.get("/reviews", response_model=List[ReviewContentResponse])
def list_reviews(
    member_id: Optional[int] = Query(None, description="Only reviews written by this member"),
    store_id: Optional[int] = Query(None, description="Only reviews of this store"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Page size"),
    offset: int = Query(0, ge=0, description="Reviews to skip"),
    service: ReviewAdmissionService = Depends(get_review_service),
) -> List[ReviewContentResponse]:
    """List live reviews, oldest first. At most one filter may be given."""
    reviews = service.list_reviews(member_id=member_id, store_id=store_id, limit=limit, offset=offset)
    return [ReviewContentResponse(**review.to_dict()) for review in reviews]


@router.get("/reviews/{review_id}", response_model=ReviewContentResponse)
def get_review(
    review_id: int,
    service: ReviewAdmissionService = Depends(get_review_service),
) -> ReviewContentResponse:
    review = service.get_review(review_id)
    return ReviewContentResponse(**review.to_dict())


@router.delete("/reviews/{review_id}", response_model=DeleteReviewResponse)
def delete_review(
    review_id: int,
    service: ReviewAdmissionService = Depends(get_review_service),
    request_id: str = Depends(get_request_id),
) -> DeleteReviewResponse:
    """Soft-delete a review. Deleting it again succeeds with deleted=false."""
    deleted = service.delete_review(review_id)
    logger.info(
        f"Delete review {review_id}: deleted={deleted}", extra={"request_id": request_id}
    )
    return DeleteReviewResponse(review_id=review_id, deleted=deleted)
