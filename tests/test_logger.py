"""
Tests for logger functionality.
"""

import pytest
from jobtracker.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["polls_attempted"] == 0

    def test_log_with_context(self, tmp_path):
        """Context is appended as JSON, datetimes included."""
        from datetime import datetime

        logger = StructuredLogger(name="test-ctx", log_dir=tmp_path, enable_console=False)
        logger.info("Watermark advanced", watermark=datetime(2024, 1, 2), count=5)

        content = next(tmp_path.glob("*.log")).read_text()
        assert "Watermark advanced | Context:" in content
        assert "2024-01-02 00:00:00" in content

    def test_poll_metrics(self, tmp_path):
        logger = StructuredLogger(name="test-metrics", log_dir=tmp_path, enable_console=False)

        logger.record_poll_attempt()
        logger.record_poll_success(fetched=10, new=3, presented=2)
        logger.record_poll_attempt()
        logger.record_poll_failure("TransientError")

        metrics = logger.get_metrics()

        assert metrics["polls_attempted"] == 2
        assert metrics["polls_successful"] == 1
        assert metrics["polls_failed"] == 1
        assert metrics["listings_fetched"] == 10
        assert metrics["listings_blocked"] == 1
        assert metrics["listings_presented"] == 2
        assert metrics["errors_by_type"] == {"TransientError": 1}
        assert metrics["success_rate"] == pytest.approx(0.5)

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(name="test-summary", log_dir=tmp_path, enable_console=False)
        logger.record_poll_attempt()
        logger.record_poll_failure("AuthError")

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "Polls: 0/1" in content
        assert "AuthError: 1" in content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_poll_attempt()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)
        assert logger2.metrics["polls_attempted"] == 0


class TestHandlers:
    def test_console_disabled_still_writes_file(self, tmp_path):
        logger = StructuredLogger(name="test-handlers", log_dir=tmp_path, enable_console=False)
        logger.info("Written to file")

        assert len(logger.logger.handlers) == 1
        assert "Written to file" in next(tmp_path.glob("*.log")).read_text()

    def test_console_enabled_adds_stream_handler(self, tmp_path):
        logger = StructuredLogger(name="test-console", log_dir=tmp_path)
        assert len(logger.logger.handlers) == 2
