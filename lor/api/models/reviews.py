"""
Review Models
Pydantic models for review and store endpoints.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ReviewContentResponse(BaseModel):
    """A review as shown in listings."""

    content: str = Field(..., description="Review text")
    rating: int = Field(..., ge=1, le=5, description="Rating (1-5)")
    image: Optional[str] = Field(None, description="Reference to the review photo")
    season: Optional[str] = Field(None, description="Season the review was written in")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "content": "Cheese dakgalbi was great, generous portions.",
                "rating": 5,
                "image": "reviews/2026/10/ilmi.jpg",
                "season": "2026-FALL",
            }
        }
    )


class SubmitReviewResponse(BaseModel):
    """Result of an admitted review."""

    review_id: int = Field(..., description="New review ID")
    store_id: int = Field(..., description="Store the receipt resolved to")
    season: str = Field(..., description="Season label the review counts against")


class ReceiptInfoResponse(BaseModel):
    """Store identity read off a verified receipt."""

    store_name: str
    store_address: str


class DeleteReviewResponse(BaseModel):
    """Acknowledgement of a delete request."""

    success: bool = True
    review_id: int
    deleted: bool = Field(..., description="False if the review had already been deleted")


class StoreResponse(BaseModel):
    """A registered store."""

    id: int
    name: str
    address: str
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
