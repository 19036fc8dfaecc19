"""
Database Session
Engine and session factory, schema creation, and retries for idempotent reads.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from ..config import get_settings
from .models import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Engine and session factory
_engine: Optional[Engine] = None
_SessionLocal = None


def build_engine(database_url: str, **kwargs) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared with the API threadpool, so same-thread
    checking is turned off for them. Pool sizing only applies to server databases.
    """
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return create_engine(database_url, connect_args=connect_args, **kwargs)

    settings = get_settings()
    kwargs.setdefault("pool_size", settings.db_pool_size)
    kwargs.setdefault("max_overflow", settings.db_max_overflow)
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        **kwargs,
    )


def get_engine() -> Engine:
    """Get database engine (singleton)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url)
        logger.info(f"Database engine created: {settings.database_url.split('@')[-1]}")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get database session factory (singleton)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
        logger.info("Database session factory created")
    return _SessionLocal


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables that don't exist yet."""
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")


def retry_read(
    fn: Callable[[], T],
    session: Optional[Session] = None,
    retries: Optional[int] = None,
    backoff: float = 0.05,
) -> T:
    """
    Run an idempotent read, retrying on transient connection errors.

    Only use for queries with no side effects, issued before the session has
    written anything: the session is rolled back before each retry.

    Args:
        fn: Zero-argument callable performing the read
        session: Session the read runs on, rolled back between attempts
        retries: Extra attempts after the first (defaults to settings.db_read_retries)
        backoff: Base delay in seconds, doubled after every failed attempt

    Returns:
        Whatever fn returns
    """
    if retries is None:
        retries = get_settings().db_read_retries

    attempt = 0
    while True:
        try:
            return fn()
        except OperationalError as e:
            if attempt >= retries:
                raise
            delay = backoff * (2 ** attempt)
            attempt += 1
            logger.warning(f"Transient read failure (attempt {attempt}/{retries}), retrying in {delay:.2f}s: {e}")
            if session is not None:
                session.rollback()
            time.sleep(delay)
