"""
Append-only run record.

Every listing presented while run logging is enabled is stored under the
timestamp the process started at, so each run can be reviewed later.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .database import SavedListing, init_database, get_session
from .schema import Listing


def _to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _from_utc_naive(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc)


def save_listings(db_path: Path, run_started_at: datetime, listings: Iterable[Listing]) -> int:
    """
    Append listings to the record of the run started at ``run_started_at``.

    Returns:
        Number of rows written
    """
    rows = [
        SavedListing(
            run_started_at=_to_utc_naive(run_started_at),
            listing_id=listing.id,
            title=listing.title,
            description=listing.description,
            url=listing.url(),
            budget=listing.budget.display(),
            published_at=_to_utc_naive(listing.published_at),
        )
        for listing in listings
    ]
    if not rows:
        return 0

    init_database(db_path)
    session = get_session(db_path)
    try:
        session.add_all(rows)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    return len(rows)


def load_runs(db_path: Path) -> Dict[datetime, List[Dict[str, Any]]]:
    """Return saved listings grouped by run start, oldest run first."""
    if not db_path.exists():
        return {}

    session = get_session(db_path)
    try:
        rows = (
            session.query(SavedListing)
            .order_by(SavedListing.run_started_at, SavedListing.id)
            .all()
        )
        runs: Dict[datetime, List[Dict[str, Any]]] = {}
        for row in rows:
            runs.setdefault(_from_utc_naive(row.run_started_at), []).append({
                "id": row.listing_id,
                "title": row.title,
                "url": row.url,
                "budget": row.budget,
                "published_at": _from_utc_naive(row.published_at),
            })
        return runs
    finally:
        session.close()
