"""
Integration test fixtures
"""

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from fakes import FakeRecognizer
from lor.api.dependencies import get_db, get_recognizer, get_review_service
from lor.api.main import create_app
from lor.reviews import ReceiptVerifier, ReviewAdmissionService


@pytest.fixture
def api_recognizer():
    return FakeRecognizer()


@pytest.fixture
def test_app(session_factory, api_recognizer, fixed_clock):
    """App wired to the SQLite test database and a canned recognizer."""
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_get_review_service(
        db: Session = Depends(get_db), recognizer=Depends(get_recognizer)
    ):
        return ReviewAdmissionService(db=db, verifier=ReceiptVerifier(recognizer), clock=fixed_clock)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_recognizer] = lambda: api_recognizer
    app.dependency_overrides[get_review_service] = override_get_review_service
    return app


@pytest.fixture
def test_api_client(test_app):
    """Create test API client. Lifespan is not run, so no schema is created on the default database."""
    return TestClient(test_app)
