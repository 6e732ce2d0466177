from typing import FrozenSet, Iterable, List

from .schema import Listing


def parse_blocklist(raw: str) -> FrozenSet[str]:
    """Turn a comma-separated keyword string into a set of lowercase terms."""
    if not raw:
        return frozenset()
    return frozenset(t.strip().lower() for t in raw.split(",") if t.strip())


def is_blocked(listing: Listing, terms: Iterable[str]) -> bool:
    """True if a lowercase term occurs in the title or description.

    Substring match, so "php" also blocks "phpunit".
    """
    title = listing.title.lower()
    description = listing.description.lower()
    return any(term in title or term in description for term in terms)


def apply(listings: Iterable[Listing], blocklist: Iterable[str]) -> List[Listing]:
    """Drop listings whose title or description contains a blocked term.

    Order of the remaining listings is preserved.
    """
    terms = [t.lower() for t in blocklist if t]
    if not terms:
        return list(listings)
    return [listing for listing in listings if not is_blocked(listing, terms)]
