"""
Dependency Injection
FastAPI dependencies for database sessions and review services.
"""

import logging
import uuid
from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from ..db.session import get_session_factory
from ..reviews import (
    ClovaReceiptClient,
    GeoBoundaryChecker,
    ReceiptRecognizer,
    ReceiptVerifier,
    ReviewAdmissionService,
    StoreResolver,
)

logger = logging.getLogger(__name__)

_recognizer: Optional[ReceiptRecognizer] = None


def get_db() -> Generator[Session, None, None]:
    """
    Get database session.

    Use as FastAPI dependency:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_recognizer() -> ReceiptRecognizer:
    """Get the receipt recognizer (singleton CLOVA client)."""
    global _recognizer
    if _recognizer is None:
        _recognizer = ClovaReceiptClient()
        logger.info("Receipt recognizer created")
    return _recognizer


def get_review_service(
    db: Session = Depends(get_db),
    recognizer: ReceiptRecognizer = Depends(get_recognizer),
) -> ReviewAdmissionService:
    """
    Get review admission service for this request.

    Use as FastAPI dependency:
        @app.post("/reviews")
        def submit(service: ReviewAdmissionService = Depends(get_review_service)):
            ...
    """
    return ReviewAdmissionService(
        db=db,
        verifier=ReceiptVerifier(recognizer),
        geo=GeoBoundaryChecker(),
    )


def get_store_resolver(db: Session = Depends(get_db)) -> StoreResolver:
    return StoreResolver(db)


def get_request_id(request: Request, x_request_id: Optional[str] = Header(None)) -> str:
    """
    Get request ID for tracing.

    Reuses the ID RequestLoggingMiddleware assigned, so router logs, middleware
    logs and the echoed X-Request-ID header agree.
    """
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return request_id
    if x_request_id:
        return x_request_id
    return str(uuid.uuid4())
