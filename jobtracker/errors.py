"""
Error taxonomy for the tracker.

Only two fetch failures are distinguished: an expired or invalid credential
(fatal to polling) and everything else (recovered by the next tick).
"""

from typing import Optional


class TrackerError(Exception):
    """Base class for all tracker errors."""
    pass


class ConfigError(TrackerError):
    """Raised when process configuration is missing or invalid."""
    pass


class FetchError(TrackerError):
    """Raised by the fetcher when a poll could not produce a batch."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class AuthError(FetchError):
    """The remote rejected the access token. Polling must stop."""
    pass


class TransientError(FetchError):
    """Network, HTTP or parse hiccup. The next scheduled tick retries."""
    pass
