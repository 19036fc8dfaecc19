"""
Store Resolution
Matches receipt store identity to a stored Store, registering new stores on first sight.
"""

import logging
import re
import unicodedata
from typing import List, Optional, Tuple

from rapidfuzz import fuzz
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db.models import Store
from ..db.session import retry_read
from .errors import StoreCreationError
from .geo import City, extract_city

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """NFKC, trimmed, single-spaced, casefolded."""
    text = unicodedata.normalize("NFKC", text or "")
    return _WHITESPACE.sub(" ", text).strip().casefold()


class StoreResolver:
    """
    Resolves a receipt's store name and address to a canonical Store.

    Matching is deterministic:
    1. Exact match on normalized name and address, lowest id first
    2. Otherwise, same normalized address and a name similarity at or above
       the threshold; highest similarity wins, ties go to the lowest id
    3. Otherwise a new store is registered

    The unique (normalized_name, normalized_address) constraint decides races
    between concurrent registrations; the loser re-reads the winner's row.
    """

    def __init__(self, db: Session, match_threshold: Optional[int] = None):
        """
        Initialize resolver.

        Args:
            db: Database session; inserts are flushed, not committed
            match_threshold: Minimum rapidfuzz ratio (0-100) for a fuzzy name match
        """
        self.db = db
        self.match_threshold = (
            match_threshold if match_threshold is not None else get_settings().store_match_threshold
        )

    def find_matches(self, name: str, address: str) -> List[Store]:
        """Stores matching name and address exactly after normalization, by id."""
        stmt = (
            select(Store)
            .where(
                Store.normalized_name == normalize(name),
                Store.normalized_address == normalize(address),
            )
            .order_by(Store.id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_similar(self, name: str, address: str) -> Optional[Store]:
        """Best fuzzy name match among stores at the same normalized address."""
        norm_name = normalize(name)
        candidates = self.db.execute(
            select(Store)
            .where(Store.normalized_address == normalize(address))
            .order_by(Store.id.asc())
        ).scalars().all()

        best: Optional[Tuple[float, Store]] = None
        for store in candidates:
            score = fuzz.ratio(norm_name, store.normalized_name)
            if score < self.match_threshold:
                continue
            # Strictly greater keeps the lowest id on ties
            if best is None or score > best[0]:
                best = (score, store)

        if best is not None:
            logger.debug(f"Fuzzy store match: {name!r} -> store {best[1].id} (score={best[0]:.1f})")
            return best[1]
        return None

    def lookup(self, name: str, address: str) -> Optional[Store]:
        """Existing store for a name/address, or None."""
        matches = self.find_matches(name, address)
        if matches:
            if len(matches) > 1:
                logger.warning(
                    f"{len(matches)} stores match {name!r} at {address!r}; using lowest id {matches[0].id}"
                )
            return matches[0]
        return self.find_similar(name, address)

    def get(self, store_id: int) -> Optional[Store]:
        return self.db.get(Store, store_id)

    def resolve(self, name: str, address: str, city: Optional[City] = None) -> Store:
        """
        Find or register the store a receipt refers to.

        Must be called before the session has pending writes: a lost
        registration race rolls the session back.

        Args:
            name: Store name from the receipt
            address: Store address from the receipt
            city: Region of the address, if already known

        Returns:
            Existing or newly flushed Store

        Raises:
            StoreCreationError: If the store could not be registered
        """
        store = retry_read(lambda: self.lookup(name, address), session=self.db)
        if store is not None:
            logger.info(f"Resolved existing store {store.id} for {name!r}")
            return store

        city = city or extract_city(address)
        store = Store(
            name=name.strip(),
            address=address.strip(),
            normalized_name=normalize(name),
            normalized_address=normalize(address),
            city=city.value if city != City.UNKNOWN else None,
        )

        try:
            self.db.add(store)
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Store {name!r} registered concurrently, re-reading: {e.orig}")
            matches = self.find_matches(name, address)
            if not matches:
                logger.error(f"Store insert conflicted but no matching row exists for {name!r}")
                raise StoreCreationError(name=name, address=address, error=str(e.orig)) from e
            return matches[0]
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to register store {name!r}: {e}", exc_info=True)
            raise StoreCreationError(name=name, address=address, error=str(e)) from e

        logger.info(f"Registered new store {store.id}: {name!r} at {address!r}")
        return store
