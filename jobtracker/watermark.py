"""
Watermark tracking.

The watermark is the published-at timestamp of the newest listing accepted by
any previous tick. A listing is new only if it was published strictly after
it. The watermark never moves backwards.
"""

import enum
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .schema import Listing


class FirstRunPolicy(enum.Enum):
    """What to do with the first batch seen while there is no watermark yet."""

    BASELINE = "baseline"  # seed the watermark, present nothing
    ALERT_ALL = "alert_all"  # present the whole first batch

    @classmethod
    def parse(cls, value: str) -> "FirstRunPolicy":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown first-run policy {value!r} (expected one of: {choices})")


class Watermark:
    """Mutable holder for the current watermark, owned by the scheduler."""

    def __init__(self, value: Optional[datetime] = None):
        self._value = value

    @property
    def value(self) -> Optional[datetime]:
        return self._value

    @property
    def is_set(self) -> bool:
        return self._value is not None

    def advance(self, value: Optional[datetime]) -> bool:
        """Move the watermark forward to ``value``.

        Returns True if it changed. Values at or before the current watermark
        are ignored.
        """
        if value is None:
            return False
        if self._value is not None and value <= self._value:
            return False
        self._value = value
        return True

    def __repr__(self) -> str:
        return f"Watermark({self._value!r})"


def newest_timestamp(batch: Sequence[Listing]) -> Optional[datetime]:
    # Batches arrive newest-first; max() keeps a jittery batch from lowering it.
    if not batch:
        return None
    return max(listing.published_at for listing in batch)


def classify(
    batch: Sequence[Listing],
    watermark: Optional[datetime],
    policy: FirstRunPolicy = FirstRunPolicy.BASELINE,
) -> Tuple[List[Listing], Optional[datetime]]:
    """
    Split a fetched batch into listings not seen before.

    Args:
        batch: Listings from one fetch, newest-first
        watermark: Current watermark, or None before the first non-empty batch
        policy: How to treat the first batch when there is no watermark

    Returns:
        Tuple of (new_listings, updated_watermark). New listings keep the
        batch order. The watermark is only moved when something is new, and
        then to the newest timestamp of the whole batch.
    """
    if not batch:
        return [], watermark

    newest = newest_timestamp(batch)

    if watermark is None:
        if policy is FirstRunPolicy.ALERT_ALL:
            return list(batch), newest
        return [], newest

    new_listings = [listing for listing in batch if listing.published_at > watermark]
    if not new_listings:
        return [], watermark
    return new_listings, max(newest, watermark)
