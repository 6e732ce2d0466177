"""
Poll scheduler.

Drives the fetch -> classify -> filter -> present pipeline on a fixed interval.
Ticks never overlap, transient failures back off, and an authentication
failure stops the tracker for good.

States:
- IDLE: waiting for the next timer fire
- TICKING: a tick is in flight; further fires are ignored
- STOPPED: terminal; the timer is cancelled and nothing runs again
"""

import enum
import threading
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional

from . import blocklist as blocklist_filter
from .errors import AuthError, FetchError, TransientError
from .logger import StructuredLogger, get_logger
from .presenter import Presenter
from .retry import BackoffPolicy
from .schema import Listing
from .watermark import FirstRunPolicy, Watermark, classify


class SchedulerState(enum.Enum):
    IDLE = "idle"
    TICKING = "ticking"
    STOPPED = "stopped"


class TickStatus(enum.Enum):
    PRESENTED = "presented"  # new listings survived the blocklist
    QUIET = "quiet"  # fetch worked, nothing to show
    SKIPPED = "skipped"  # a tick was already in flight
    TRANSIENT_ERROR = "transient_error"
    AUTH_ERROR = "auth_error"
    STOPPED = "stopped"


@dataclass
class TickOutcome:
    status: TickStatus
    presented: List[Listing] = field(default_factory=list)
    error: Optional[FetchError] = None


class IntervalTimer:
    """Sleeps between ticks and can be cancelled from anywhere.

    ``wait`` returns False once the timer is cancelled, including when the
    cancellation happened before the wait started.
    """

    def __init__(self):
        self._cancelled = threading.Event()

    def wait(self, seconds: float) -> bool:
        return not self._cancelled.wait(max(seconds, 0))

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class Scheduler:
    """Owns the watermark and runs ticks one at a time."""

    def __init__(
        self,
        fetch: Callable[[], List[Listing]],
        presenter: Presenter,
        interval: float,
        blocklist: FrozenSet[str] = frozenset(),
        first_run_policy: FirstRunPolicy = FirstRunPolicy.BASELINE,
        backoff: Optional[BackoffPolicy] = None,
        timer: Optional[IntervalTimer] = None,
        watermark: Optional[Watermark] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetch = fetch
        self.presenter = presenter
        self.interval = interval
        self.blocklist = blocklist
        self.first_run_policy = first_run_policy
        self.backoff = backoff or BackoffPolicy(base_delay=min(5.0, interval), max_delay=interval)
        self.timer = timer or IntervalTimer()
        self.watermark = watermark or Watermark()
        self.logger = logger or get_logger()

        self.state = SchedulerState.IDLE
        self.consecutive_failures = 0
        self.stopped_by_auth = False

    @property
    def stopped(self) -> bool:
        return self.state is SchedulerState.STOPPED

    def fire(self) -> TickOutcome:
        """Handle one timer fire."""
        if self.state is SchedulerState.STOPPED:
            return TickOutcome(TickStatus.STOPPED)
        if self.state is SchedulerState.TICKING:
            self.logger.debug("Tick already in flight; ignoring timer fire")
            return TickOutcome(TickStatus.SKIPPED)

        self.state = SchedulerState.TICKING
        try:
            return self._tick()
        finally:
            if self.state is SchedulerState.TICKING:
                self.state = SchedulerState.IDLE

    def _tick(self) -> TickOutcome:
        self.logger.record_poll_attempt()
        try:
            batch = self.fetch()
        except AuthError as e:
            self.logger.record_poll_failure(type(e).__name__)
            self._halt(e)
            return TickOutcome(TickStatus.AUTH_ERROR, error=e)
        except TransientError as e:
            self.logger.record_poll_failure(type(e).__name__)
            self.consecutive_failures += 1
            self.logger.error(
                "Error while fetching jobs",
                error=str(e),
                consecutive_failures=self.consecutive_failures,
            )
            return TickOutcome(TickStatus.TRANSIENT_ERROR, error=e)

        self.consecutive_failures = 0
        new_listings, updated = classify(batch, self.watermark.value, self.first_run_policy)
        if self.watermark.advance(updated):
            self.logger.debug("Watermark advanced", watermark=updated)
        survivors = blocklist_filter.apply(new_listings, self.blocklist)

        self.logger.debug(
            "Tick classified",
            fetched=len(batch),
            new=len(new_listings),
            blocked=len(new_listings) - len(survivors),
        )

        if survivors:
            self.presenter.present(survivors)
        self.logger.record_poll_success(
            fetched=len(batch), new=len(new_listings), presented=len(survivors)
        )
        if not survivors:
            return TickOutcome(TickStatus.QUIET)
        return TickOutcome(TickStatus.PRESENTED, presented=survivors)

    def _halt(self, error: AuthError) -> None:
        self.state = SchedulerState.STOPPED
        self.stopped_by_auth = True
        self.timer.cancel()
        self.logger.critical("Access token rejected; tracker stopped", error=str(error))
        self.presenter.notify_stopped()

    def next_delay(self) -> float:
        return self.backoff.delay(self.consecutive_failures)

    def run(self, run_immediately: bool = True) -> None:
        """Fire ticks until the timer is cancelled."""
        self.logger.info("Tracker started", interval=self.interval)
        delay = 0.0 if run_immediately else self.interval
        while not self.stopped and self.timer.wait(delay):
            self.fire()
            delay = self.next_delay()
        self.logger.info("Tracker loop exited", state=self.state.value)

    def stop(self) -> None:
        """Stop without the credential alert (e.g. Ctrl+C)."""
        self.state = SchedulerState.STOPPED
        self.timer.cancel()
