"""
SQLAlchemy ORM Models
Database table definitions using SQLAlchemy ORM.
"""

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, TIMESTAMP, Text,
    ForeignKey, Index, UniqueConstraint, CheckConstraint, false
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Member(Base):
    """
    Member model.

    Identity reference only; members are registered by the identity service.
    """
    __tablename__ = 'members'

    id = Column(Integer, primary_key=True, autoincrement=True)
    nickname = Column(String(64), nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    reviews = relationship("Review", back_populates="member")

    def __repr__(self):
        return f"<Member(id={self.id})>"


class Store(Base):
    """
    Store model.

    A physical restaurant, registered the first time a receipt from it is verified.
    The normalized name/address pair is unique so that concurrent registrations
    of the same store collapse into one row.
    """
    __tablename__ = 'stores'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, comment='Store name as printed on the receipt')
    address = Column(String(512), nullable=False, comment='Store address as printed on the receipt')
    normalized_name = Column(String(255), nullable=False)
    normalized_address = Column(String(512), nullable=False, index=True)

    # Optional geo metadata
    city = Column(String(32), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    reviews = relationship("Review", back_populates="store")

    __table_args__ = (
        UniqueConstraint('normalized_name', 'normalized_address', name='uq_stores_name_address'),
    )

    def __repr__(self):
        return f"<Store(id={self.id}, name={self.name})>"


class Review(Base):
    """
    Review model.

    Soft-deleted reviews keep their row but are excluded from listings and
    from the one-review-per-season rule.
    """
    __tablename__ = 'reviews'

    id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(Integer, ForeignKey('members.id'), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey('stores.id'), nullable=False, index=True)

    rating = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    season = Column(String(16), nullable=False, comment='Season label, e.g. 2026-FALL')
    image = Column(String(512), nullable=True, comment='Reference to an uploaded review image')

    # Soft delete
    deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)

    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    member = relationship("Member", back_populates="reviews")
    store = relationship("Store", back_populates="reviews")

    # One live review per member, store and season
    __table_args__ = (
        CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating'),
        Index(
            'uq_reviews_member_store_season',
            'member_id', 'store_id', 'season',
            unique=True,
            postgresql_where=(deleted == false()),
            sqlite_where=(deleted == false()),
        ),
    )

    def soft_delete(self, when) -> None:
        """Mark the review as deleted."""
        self.deleted = True
        self.deleted_at = when

    def __repr__(self):
        return f"<Review(id={self.id}, member_id={self.member_id}, store_id={self.store_id}, season={self.season})>"
