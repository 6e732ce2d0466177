import argparse
import dataclasses
import os
from datetime import datetime, timezone
from pathlib import Path

from . import __version__
from .config import Settings
from .env import load_env
from .errors import ConfigError
from .fetcher import Fetcher
from .logger import get_logger
from .presenter import Presenter
from .retry import BackoffPolicy
from .scheduler import Scheduler, TickStatus
from .storage import load_runs
from .watermark import FirstRunPolicy


def load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        raise SystemExit(f"Configuration error: {e}")


def build_scheduler(settings: Settings) -> Scheduler:
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    presenter = Presenter(
        db_path=settings.db_path if settings.enable_logging else None,
        run_started_at=datetime.now(timezone.utc),
    )
    fetcher = Fetcher(settings.access_token, timeout=settings.request_timeout)
    backoff = BackoffPolicy(
        base_delay=min(settings.retry_base_delay, settings.fetch_interval),
        max_delay=settings.fetch_interval,
    )
    return Scheduler(
        fetch=fetcher.fetch,
        presenter=presenter,
        interval=settings.fetch_interval,
        blocklist=settings.blocked_keywords,
        first_run_policy=settings.first_run_policy,
        backoff=backoff,
        logger=logger,
    )


def cmd_run(args: argparse.Namespace) -> None:
    settings = load_settings()
    scheduler = build_scheduler(settings)
    scheduler.logger.info(
        "Watching saved search",
        interval=settings.fetch_interval,
        blocked_keywords=sorted(settings.blocked_keywords),
        first_run_policy=settings.first_run_policy.value,
        run_logging=settings.enable_logging,
    )
    try:
        scheduler.run()
    except KeyboardInterrupt:
        scheduler.stop()
        print("\nStopped.")
    finally:
        scheduler.logger.log_metrics_summary()
    if scheduler.stopped_by_auth:
        raise SystemExit(1)


def cmd_once(args: argparse.Namespace) -> None:
    # With no earlier tick to compare against, show the whole current feed.
    settings = dataclasses.replace(load_settings(), first_run_policy=FirstRunPolicy.ALERT_ALL)
    scheduler = build_scheduler(settings)
    outcome = scheduler.fire()
    if outcome.status is TickStatus.PRESENTED:
        print(f"{len(outcome.presented)} new listings.")
    elif outcome.status is TickStatus.QUIET:
        print("No new listings.")
    elif outcome.status is TickStatus.AUTH_ERROR:
        raise SystemExit(f"Access token rejected: {outcome.error}")
    else:
        raise SystemExit(f"Fetch failed: {outcome.error}")


def cmd_runs(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    runs = load_runs(db_path)
    if not runs:
        print(f"No saved runs in {db_path}")
        return
    print(f"Found {len(runs)} runs in {db_path}:\n")
    for started_at, listings in runs.items():
        print(f"Run started {started_at.isoformat()} ({len(listings)} listings)")
        if args.verbose:
            for listing in listings:
                print(f"  {listing['title']}")
                print(f"    URL: {listing['url']}")
                print(f"    Budget: {listing['budget']}")
        print()


def main():
    # Load .env if present (MASTER_ACCESS_TOKEN, BLOCKED_KEYWORDS, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="jobtracker", description="Job Tracker: saved-search watcher")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    run = subparsers.add_parser("run", help="Poll the saved search until stopped (default)")
    run.set_defaults(func=cmd_run)

    once = subparsers.add_parser("once", help="Poll once, show every listing that passes the blocklist, and exit")
    once.set_defaults(func=cmd_once)

    runs = subparsers.add_parser("runs", help="List runs saved while ENABLE_LOGGING was on")
    runs.add_argument("--db", default=os.getenv("JOBS_DB", "data/jobs.db"), help="Path to run record database (default: data/jobs.db)")
    runs.add_argument("--verbose", "-v", action="store_true", help="Show every listing")
    runs.set_defaults(func=cmd_runs)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    cmd_run(args)


if __name__ == "__main__":
    main()
