"""
Pytest configuration and shared fixtures
"""

import sys
from pathlib import Path
from typing import List

import pytest
from sqlalchemy.orm import sessionmaker

# Add project root and tests directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from lor.db.models import Member
from lor.db.session import build_engine, init_db
from lor.reviews import ReceiptVerifier, ReviewAdmissionService

from fakes import FIXED_NOW, FakeRecognizer


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite engine so threads get their own connections."""
    engine = build_engine(f"sqlite:///{tmp_path / 'lor.db'}", connect_args={"timeout": 30})
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def member_ids(session_factory) -> List[int]:
    """Three registered members."""
    with session_factory() as session:
        members = [Member(nickname=name) for name in ("minji", "junho", "seoyeon")]
        session.add_all(members)
        session.commit()
        return [member.id for member in members]


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def service(db, recognizer, fixed_clock):
    return ReviewAdmissionService(db=db, verifier=ReceiptVerifier(recognizer), clock=fixed_clock)


@pytest.fixture
def receipt_image() -> bytes:
    return b"\xff\xd8\xff\xe0fake-jpeg-receipt"
