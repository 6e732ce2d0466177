"""
Backoff policy for handling transient poll failures.

The fetcher never retries on its own; the scheduler asks the policy how long
to wait before the next tick after consecutive failures.
"""

from typing import Optional


class BackoffPolicy:
    """
    Exponential backoff capped at a ceiling.

    The n-th consecutive failure (1-based) waits
    ``base_delay * exponential_base ** (n - 1)`` seconds, never more than
    ``max_delay``.
    """

    def __init__(
        self,
        base_delay: float = 5.0,
        max_delay: float = 180.0,
        exponential_base: float = 2.0,
    ):
        """
        Initialize backoff policy.

        Args:
            base_delay: Delay after the first failure in seconds
            max_delay: Ceiling for any delay (the poll interval)
            exponential_base: Growth factor per consecutive failure
        """
        if base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if max_delay < base_delay:
            raise ValueError("max_delay must be >= base_delay")
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def delay(self, failures: int) -> float:
        """
        Return the wait before the next attempt.

        Args:
            failures: Number of consecutive failures so far (0 = healthy)

        Returns:
            Seconds to wait; ``max_delay`` when healthy
        """
        if failures <= 0:
            return self.max_delay
        delay = self.base_delay * (self.exponential_base ** (failures - 1))
        return min(delay, self.max_delay)


AUTH_STATUS_CODES = {401}


def is_auth_status(status_code: Optional[int]) -> bool:
    """
    Check if HTTP status code means the access token was rejected.

    Args:
        status_code: HTTP status code

    Returns:
        True if polling must stop
    """
    return status_code in AUTH_STATUS_CODES


def should_retry_http_status(status_code: int) -> bool:
    """
    Check if HTTP status code indicates a retryable error.

    Args:
        status_code: HTTP status code

    Returns:
        True if should retry
    """
    # Retry on server errors and rate limiting
    retryable_codes = {
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }

    return status_code in retryable_codes
