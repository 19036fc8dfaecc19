#!/usr/bin/env python3
"""
Database Setup Script
Creates the schema and optionally registers members.

Usage:
    python -m lor.scripts.init_db
    python -m lor.scripts.init_db --member alice --member bob
    python -m lor.scripts.init_db --database-url sqlite:///lor.db
"""

import argparse
import logging
import sys
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..config import get_settings
from ..db.models import Member
from ..db.session import build_engine, init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def register_members(session_factory: sessionmaker, nicknames: List[str]) -> List[int]:
    """Insert one member per nickname and return their IDs."""
    with session_factory() as db:
        members = [Member(nickname=nickname) for nickname in nicknames]
        db.add_all(members)
        db.commit()
        return [member.id for member in members]


def main(argv: Optional[List[str]] = None) -> int:
    """Create tables and register members."""
    parser = argparse.ArgumentParser(description="Create the review database schema")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: DATABASE_URL from settings)",
    )
    parser.add_argument(
        "--member",
        action="append",
        default=[],
        metavar="NICKNAME",
        help="Register a member with this nickname (repeatable)",
    )

    args = parser.parse_args(argv)
    database_url = args.database_url or get_settings().database_url

    try:
        engine = build_engine(database_url)
        init_db(engine)

        if args.member:
            member_ids = register_members(sessionmaker(bind=engine), args.member)
            for nickname, member_id in zip(args.member, member_ids):
                logger.info(f"Registered member {nickname!r} with id {member_id}")
    except SQLAlchemyError as e:
        logger.error(f"Database setup failed: {e}")
        return 1

    logger.info("Database setup complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
