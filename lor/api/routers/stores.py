"""
Store Endpoints
GET /stores - Look up registered stores by name and address.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...reviews import StoreResolver
from ..dependencies import get_store_resolver
from ..models.reviews import StoreResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["stores"])


@router.get("/stores", response_model=List[StoreResponse])
def find_stores(
    name: str = Query(..., min_length=1),
    address: str = Query(..., min_length=1),
    resolver: StoreResolver = Depends(get_store_resolver),
) -> List[StoreResponse]:
    """Stores matching a name and address exactly after normalization, lowest id first."""
    stores = resolver.find_matches(name, address)
    return [StoreResponse.model_validate(store) for store in stores]
