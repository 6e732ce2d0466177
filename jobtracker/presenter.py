"""
Presentation of new listings: desktop alert, terminal log and run record.

The presenter only ever sees the final filtered list for a tick.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, TextIO
import sys

from plyer import notification
from sqlalchemy.exc import SQLAlchemyError

from .logger import get_logger
from .schema import Listing
from .storage import save_listings

APP_TITLE = "Job Tracker"
BANNER = "=" * 47
SEPARATOR = "=" * 22

Notifier = Callable[[str, str], None]


def desktop_alert(title: str, message: str) -> None:
    notification.notify(title=title, message=message, app_name=APP_TITLE, timeout=10)


def from_now(ts: datetime, now: Optional[datetime] = None) -> str:
    """Human readable distance from ``ts`` to ``now``, e.g. '5 minutes ago'."""
    now = now or datetime.now(timezone.utc)
    seconds = (now - ts).total_seconds()
    future = seconds < 0
    seconds = abs(seconds)

    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 45:
        text = "a few seconds"
    elif seconds < 90:
        text = "a minute"
    elif minutes < 45:
        text = f"{round(minutes)} minutes"
    elif minutes < 90:
        text = "an hour"
    elif hours < 22:
        text = f"{round(hours)} hours"
    elif hours < 36:
        text = "a day"
    elif days < 26:
        text = f"{round(days)} days"
    elif days < 45:
        text = "a month"
    elif days < 320:
        text = f"{round(days / 30.4)} months"
    elif days < 548:
        text = "a year"
    else:
        text = f"{round(days / 365)} years"

    return f"in {text}" if future else f"{text} ago"


def render_listing(listing: Listing, now: Optional[datetime] = None) -> str:
    return "\n".join([
        f"    {SEPARATOR}",
        f"    {listing.title}",
        f"    {listing.url()}",
        f"    {from_now(listing.published_at, now)}",
        f"    Budget: {listing.budget.display()}",
        f"    {SEPARATOR}",
    ])


class Presenter:
    """Surfaces listings to the user.

    Args:
        notifier: callable(title, message) showing a desktop alert
        out: stream the listing log is written to
        db_path: run record database; None disables run logging
        run_started_at: key of this run in the run record
    """

    def __init__(
        self,
        notifier: Notifier = desktop_alert,
        out: Optional[TextIO] = None,
        db_path: Optional[Path] = None,
        run_started_at: Optional[datetime] = None,
    ):
        self.notifier = notifier
        self.out = out
        self.db_path = db_path
        self.run_started_at = run_started_at or datetime.now(timezone.utc)

    def present(self, listings: List[Listing]) -> None:
        if not listings:
            return
        logger = get_logger()

        self._alert(f"New {len(listings)} jobs available.")
        self._write(self.render(listings))
        logger.info("Presented new listings", count=len(listings))

        if self.db_path is not None:
            self._record(listings)

    def render(self, listings: List[Listing], now: Optional[datetime] = None) -> str:
        # Oldest first so the newest listing ends up at the bottom of the terminal.
        blocks = [render_listing(listing, now) for listing in reversed(listings)]
        return "\n" + BANNER + "\n" + "\n".join(blocks) + "\n"

    def notify_stopped(self) -> None:
        get_logger().error("Please provide a valid master_access_token.")
        self._alert("Tracker stopped")

    def _record(self, listings: List[Listing]) -> None:
        # Run record is optional: log and keep going.
        try:
            saved = save_listings(self.db_path, self.run_started_at, listings)
        except (SQLAlchemyError, OSError) as e:
            get_logger().warning("Could not save listings to run record", db=str(self.db_path), error=str(e))
            return
        get_logger().debug("Saved listings to run record", count=saved, db=str(self.db_path))

    def _alert(self, message: str) -> None:
        try:
            self.notifier(APP_TITLE, message)
        except Exception as e:
            # No notification backend on this OS (headless box, missing dbus...)
            get_logger().warning("Desktop notification failed", error=str(e))

    def _write(self, text: str) -> None:
        out = self.out or sys.stdout
        out.write(text + "\n")
        out.flush()
