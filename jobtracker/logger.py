"""
Structured logging system for the job tracker.

Provides centralized logging with console and file outputs, and
poll metrics for monitoring tracker health over a long run.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks poll and listing counters across the process lifetime.
    """

    def __init__(
        self,
        name: str = "jobtracker",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        # Metrics tracking
        self.metrics = {
            "polls_attempted": 0,
            "polls_successful": 0,
            "polls_failed": 0,
            "errors_by_type": {},
            "listings_fetched": 0,
            "listings_new": 0,
            "listings_blocked": 0,
            "listings_presented": 0,
        }

        if enable_console:
            self._add_handler(logging.StreamHandler(sys.stdout), level.upper(), CONSOLE_FORMAT)

        # File gets everything regardless of level.
        log_dir = log_dir or Path("logs")
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"jobtracker_{datetime.now().strftime('%Y%m%d')}.log"
        self._add_handler(logging.FileHandler(log_file, encoding="utf-8"), "DEBUG", FILE_FORMAT)

    def _add_handler(self, handler: logging.Handler, level: str, fmt: str):
        handler.setLevel(getattr(logging, level))
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
        self.logger.addHandler(handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_poll_attempt(self):
        """Increment poll counter."""
        self.metrics["polls_attempted"] += 1

    def record_poll_success(self, fetched: int, new: int, presented: int):
        """Record a completed tick and how many listings flowed through it."""
        self.metrics["polls_successful"] += 1
        self.metrics["listings_fetched"] += fetched
        self.metrics["listings_new"] += new
        self.metrics["listings_blocked"] += new - presented
        self.metrics["listings_presented"] += presented

    def record_poll_failure(self, error_type: str):
        """Record a failed tick."""
        self.metrics["polls_failed"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        if metrics_copy["polls_attempted"] > 0:
            metrics_copy["success_rate"] = round(
                metrics_copy["polls_successful"] / metrics_copy["polls_attempted"], 3
            )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total_attempts = metrics["polls_attempted"]
        overall_rate = round(metrics.get("success_rate", 0) * 100, 1)

        self.info("=== Tracker Session Metrics ===")
        self.info(f"Polls: {metrics['polls_successful']}/{total_attempts} ({overall_rate}% success)")
        self.info(
            f"Listings: {metrics['listings_fetched']} fetched, {metrics['listings_new']} new, "
            f"{metrics['listings_blocked']} blocked, {metrics['listings_presented']} presented"
        )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "jobtracker",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
