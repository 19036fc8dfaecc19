"""
Review Values
Transient values passed between the admission stages.
"""

from dataclasses import dataclass
from typing import Optional

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class ReceiptInfo:
    """Store identity read off a verified receipt."""

    store_name: str
    store_address: str


@dataclass
class ReviewContent:
    """
    User-authored review fields.

    season is filled in by the admission service on submission and read back
    from storage on listing.
    """

    content: str
    rating: int
    image: Optional[str] = None
    season: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.rating, bool) or not isinstance(self.rating, int):
            raise ValueError(f"rating must be an integer, got {self.rating!r}")
        if not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValueError(f"rating must be between {MIN_RATING} and {MAX_RATING}, got {self.rating}")

    @classmethod
    def from_review(cls, review) -> "ReviewContent":
        """Build from a Review row."""
        return cls(
            content=review.content,
            rating=review.rating,
            image=review.image,
            season=review.season,
        )

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "rating": self.rating,
            "image": self.image,
            "season": self.season,
        }
