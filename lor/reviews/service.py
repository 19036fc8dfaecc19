"""
Review Admission Service
Admits receipt-verified reviews and manages their soft-delete lifecycle.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.models import Member, Review
from ..db.session import retry_read
from .duplicates import DuplicateCheck, DuplicateGuard
from .errors import (
    DuplicateReviewError,
    MemberNotFoundError,
    ReceiptInvalidError,
    ReviewNotFoundError,
    ReviewPersistenceError,
)
from .geo import GeoBoundaryChecker
from .models import ReceiptInfo, ReviewContent
from .receipt import ReceiptVerifier
from .season import current_season
from .stores import StoreResolver

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReviewAdmissionService:
    """
    Orchestrates review submission.

    Stages run strictly in order and stop at the first failure:
    member lookup -> receipt verification -> service area check ->
    store resolution -> duplicate check -> insert.

    The store registration and the review insert share one transaction, so a
    rejected submission leaves nothing behind.
    """

    def __init__(
        self,
        db: Session,
        verifier: ReceiptVerifier,
        geo: Optional[GeoBoundaryChecker] = None,
        store_resolver: Optional[StoreResolver] = None,
        duplicate_guard: Optional[DuplicateGuard] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize admission service.

        Args:
            db: Database session for this request
            verifier: Receipt verifier wrapping the recognition service
            geo: Service area checker
            store_resolver: Store resolver (built on db if not provided)
            duplicate_guard: Duplicate guard (built on db if not provided)
            clock: Source of the current time, used for season labels and deletion stamps
        """
        self.db = db
        self.verifier = verifier
        self.geo = geo or GeoBoundaryChecker()
        self.stores = store_resolver or StoreResolver(db)
        self.duplicates = duplicate_guard or DuplicateGuard(db)
        self.clock = clock

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_review(
        self,
        member_id: int,
        image: bytes,
        content: ReviewContent,
        now: Optional[datetime] = None,
    ) -> Review:
        """
        Submit a review backed by a receipt photo.

        The member is looked up before the receipt is sent anywhere, so
        requests that cannot succeed cost no recognition call.

        Args:
            member_id: Acting member
            image: Receipt image bytes
            content: Review text, rating and optional image reference
            now: Submission time (defaults to the service clock)

        Returns:
            The persisted Review

        Raises:
            MemberNotFoundError, ReceiptInvalidError, UnsupportedAreaError,
            StoreCreationError, DuplicateReviewError, ReviewPersistenceError
        """
        member = self._get_member(member_id)
        receipt_info = self.verify_receipt(image)
        return self._admit(member, content, receipt_info, now)

    def verify_receipt(self, image: bytes) -> ReceiptInfo:
        """
        Verify a receipt and check that its store is inside the service area.

        Raises:
            ReceiptInvalidError: If recognition failed or was not conclusive
            UnsupportedAreaError: If the store address is outside the service area
        """
        result = self.verifier.verify(image)
        if not result.ok:
            logger.info(f"Receipt rejected: {result.reason}")
            raise ReceiptInvalidError(result.reason)

        self.geo.check(result.info.store_address)
        return result.info

    def create_review(
        self,
        member_id: int,
        content: ReviewContent,
        receipt_info: ReceiptInfo,
        now: Optional[datetime] = None,
    ) -> Review:
        """
        Create a review from an already verified receipt.

        The service area is checked again since receipt_info comes from the caller.
        """
        member = self._get_member(member_id)
        self.geo.check(receipt_info.store_address)
        return self._admit(member, content, receipt_info, now)

    def _get_member(self, member_id: int) -> Member:
        member = retry_read(lambda: self.db.get(Member, member_id), session=self.db)
        if member is None:
            logger.info(f"Submission by unknown member {member_id}")
            raise MemberNotFoundError(member_id)
        return member

    def _admit(
        self,
        member: Member,
        content: ReviewContent,
        receipt_info: ReceiptInfo,
        now: Optional[datetime],
    ) -> Review:
        member_id = member.id
        season = current_season(now or self.clock())

        store = self.stores.resolve(receipt_info.store_name, receipt_info.store_address)
        store_id = store.id

        if self.duplicates.check(member_id, store_id, season) is DuplicateCheck.DUPLICATE:
            self.db.rollback()
            raise DuplicateReviewError(member_id, store_id, season)

        review = Review(
            member_id=member_id,
            store_id=store_id,
            rating=content.rating,
            content=content.content,
            season=season,
            image=content.image,
            deleted=False,
        )

        try:
            self.db.add(review)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Concurrent duplicate review rejected by constraint: member={member_id}, store={store_id}")
            raise DuplicateReviewError(member_id, store_id, season) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save review: {e}", exc_info=True)
            raise ReviewPersistenceError(str(e)) from e

        content.season = season
        logger.info(
            f"Review {review.id} admitted: member={member_id}, store={store_id}, season={season}"
        )
        return review

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_review(self, review_id: int, now: Optional[datetime] = None) -> bool:
        """
        Soft-delete a review.

        Deleting an already deleted review succeeds without writing anything.

        Returns:
            True if the review was deleted by this call, False if it already was

        Raises:
            ReviewNotFoundError: If no review has this id
        """
        review = self.db.get(Review, review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)

        if review.deleted:
            logger.info(f"Review {review_id} already deleted")
            return False

        review.soft_delete(now or self.clock())
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete review {review_id}: {e}", exc_info=True)
            raise ReviewPersistenceError(str(e)) from e

        logger.info(f"Review {review_id} deleted")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_reviews(
        self,
        member_id: Optional[int] = None,
        store_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[ReviewContent]:
        """
        Live reviews, oldest first, filtered by member or by store.

        Args:
            member_id: Only reviews written by this member
            store_id: Only reviews of this store
            limit: Page size (all remaining reviews if None)
            offset: Reviews to skip

        Raises:
            ValueError: If both filters are given, or the page bounds are negative
        """
        if member_id is not None and store_id is not None:
            raise ValueError("Filter by member_id or store_id, not both")
        if offset < 0 or (limit is not None and limit < 0):
            raise ValueError(f"Invalid page: limit={limit}, offset={offset}")

        stmt = select(Review).where(Review.deleted.is_(False))
        if member_id is not None:
            stmt = stmt.where(Review.member_id == member_id)
        if store_id is not None:
            stmt = stmt.where(Review.store_id == store_id)
        stmt = stmt.order_by(Review.id.asc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        reviews = retry_read(lambda: self.db.execute(stmt).scalars().all(), session=self.db)
        return [ReviewContent.from_review(review) for review in reviews]

    def get_review(self, review_id: int) -> ReviewContent:
        review = retry_read(lambda: self.db.get(Review, review_id), session=self.db)
        if review is None or review.deleted:
            raise ReviewNotFoundError(review_id)
        return ReviewContent.from_review(review)

    def count_store_reviews(self, store_id: int, season: str) -> int:
        """Live reviews of a store within one season."""
        stmt = select(func.count(Review.id)).where(
            Review.store_id == store_id,
            Review.season == season,
            Review.deleted.is_(False),
        )
        return retry_read(lambda: self.db.execute(stmt).scalar_one(), session=self.db)
