"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timezone
from typing import Dict, Any, List

from jobtracker.logger import get_logger, reset_logger
from jobtracker.schema import Budget, Listing


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir and keep the console clean."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


def ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def make_listing():
    """Factory for listings with sensible defaults."""
    counter = [0]

    def _make(
        published_at: str = "2024-01-01T00:00:00Z",
        title: str = "Python developer",
        description: str = "Build a scraper",
        id: str = None,
        budget: Budget = None,
    ) -> Listing:
        counter[0] += 1
        listing_id = id or f"listing-{counter[0]}"
        return Listing(
            id=listing_id,
            title=title,
            description=description,
            published_at=ts(published_at),
            budget=budget or Budget(text="$20.00-$40.00"),
            url_token=f"~01{listing_id}",
        )

    return _make


@pytest.fixture
def hourly_record() -> Dict[str, Any]:
    """Raw saved-search record with an hourly budget."""
    return {
        "uid": "1700000000000000001",
        "ciphertext": "~0123abc",
        "title": "Senior Python Engineer",
        "description": "Help us build data pipelines.",
        "publishedOn": "2024-01-02T00:00:00+00:00",
        "createdOn": "2024-01-01T23:59:00+00:00",
        "hourlyBudgetText": "$30.00-$60.00",
        "amount": {"amount": 0, "currencyCode": "USD"},
    }


@pytest.fixture
def fixed_record() -> Dict[str, Any]:
    """Raw saved-search record with a fixed-price budget."""
    return {
        "uid": "1700000000000000002",
        "ciphertext": "~0456def",
        "title": "Scrape a product catalog",
        "description": "One-off scraping job.",
        "publishedOn": "2023-12-31T00:00:00Z",
        "hourlyBudgetText": None,
        "amount": {"amount": 150, "currencyCode": "USD"},
    }


class FakePresenter:
    """Records what the scheduler hands over instead of alerting."""

    def __init__(self):
        self.presented: List[List[Listing]] = []
        self.stopped_notifications = 0

    def present(self, listings):
        self.presented.append(list(listings))

    def notify_stopped(self):
        self.stopped_notifications += 1


class FakeTimer:
    """Timer that never sleeps; allows a fixed number of fires."""

    def __init__(self, fires: int = 10):
        self.remaining = fires
        self.waits: List[float] = []
        self.cancelled = False

    def wait(self, seconds: float) -> bool:
        if self.cancelled or self.remaining <= 0:
            return False
        self.waits.append(seconds)
        self.remaining -= 1
        return True

    def cancel(self) -> None:
        self.cancelled = True


@pytest.fixture
def fake_presenter() -> FakePresenter:
    return FakePresenter()


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()
