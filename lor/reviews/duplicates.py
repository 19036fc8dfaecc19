"""
Duplicate Guard
One live review per member, store and season.
"""

import logging
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import Review

logger = logging.getLogger(__name__)


class DuplicateCheck(Enum):
    ALLOWED = "allowed"
    DUPLICATE = "duplicate"


class DuplicateGuard:
    """
    Point-in-time check for an existing non-deleted review.

    Two concurrent submissions can both pass this check; the partial unique
    index on reviews rejects the second insert.
    """

    def __init__(self, db: Session):
        self.db = db

    def count(self, member_id: int, store_id: int, season: str) -> int:
        stmt = select(func.count(Review.id)).where(
            Review.member_id == member_id,
            Review.store_id == store_id,
            Review.season == season,
            Review.deleted.is_(False),
        )
        return self.db.execute(stmt).scalar_one()

    def check(self, member_id: int, store_id: int, season: str) -> DuplicateCheck:
        if self.count(member_id, store_id, season) > 0:
            logger.info(f"Duplicate review: member={member_id}, store={store_id}, season={season}")
            return DuplicateCheck.DUPLICATE
        return DuplicateCheck.ALLOWED
