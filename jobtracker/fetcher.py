"""Saved-search fetcher: one authenticated request per tick, no retries."""

from typing import List, Optional

import requests

from .errors import AuthError, TransientError
from .logger import get_logger
from .retry import is_auth_status, should_retry_http_status
from .schema import Listing, listing_from_record

SAVED_SEARCH_ENDPOINT = "https://www.upwork.com/ab/find-work/api/feeds/saved-searches"
REFERER = "https://www.upwork.com/nx/find-work/"
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/93.0.4577.63 Safari/537.36"
)


def build_headers(access_token: str) -> dict:
    return {
        "X-Requested-With": "XMLHttpRequest",
        "cookie": f"master_access_token={access_token};",
        "referer": REFERER,
        "user-agent": USER_AGENT,
    }


class Fetcher:
    """Fetch the saved-search feed and turn it into a batch of listings.

    Raises:
        AuthError: the remote rejected the access token
        TransientError: anything else went wrong (network, HTTP, JSON)
    """

    def __init__(
        self,
        access_token: str,
        endpoint: str = SAVED_SEARCH_ENDPOINT,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(build_headers(access_token))

    def fetch(self) -> List[Listing]:
        logger = get_logger()
        try:
            resp = self.session.get(self.endpoint, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if is_auth_status(status):
                logger.error("Saved search rejected the access token", status=status)
                raise AuthError(f"Access token rejected ({status})", status=status)
            if status is not None and should_retry_http_status(status):
                logger.warning("Saved search temporarily unavailable", status=status)
            else:
                logger.error("Saved search request failed", status=status)
            raise TransientError(f"Saved search request failed ({status})", status=status)
        except requests.exceptions.Timeout:
            logger.warning("Saved search request timed out", timeout=self.timeout)
            raise TransientError("Saved search request timed out")
        except requests.exceptions.RequestException as e:
            logger.error("Saved search request error", error=str(e))
            raise TransientError(f"Saved search request error: {e}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise TransientError(f"Saved search returned invalid JSON: {e}")

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise TransientError("Saved search response has no 'results' array")

        return parse_results(results)


def parse_results(results: list) -> List[Listing]:
    """Convert raw records to listings in source order, skipping malformed ones."""
    logger = get_logger()
    batch: List[Listing] = []
    for idx, record in enumerate(results):
        try:
            batch.append(listing_from_record(record))
        except ValueError as e:
            logger.warning("Skipping malformed listing", index=idx, error=str(e))
    return batch
