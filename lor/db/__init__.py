"""
Database ORM Models
SQLAlchemy ORM models and session management.
"""

from .models import Base, Member, Store, Review
from .session import build_engine, get_engine, get_session_factory, init_db, retry_read

__all__ = [
    "Base",
    "Member",
    "Store",
    "Review",
    "build_engine",
    "get_engine",
    "get_session_factory",
    "init_db",
    "retry_read",
]
