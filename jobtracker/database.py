"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for the per-run record of presented listings.
"""

from datetime import datetime, timezone
from pathlib import Path
from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SavedListing(Base):
    """A listing presented during one tracker run."""

    __tablename__ = "saved_listings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_started_at = Column(DateTime, nullable=False, index=True)  # UTC, naive
    listing_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    url = Column(String, nullable=False)
    budget = Column(String, nullable=False)
    published_at = Column(DateTime, nullable=False)  # UTC, naive
    saved_at = Column(DateTime, nullable=False, default=_utcnow)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
