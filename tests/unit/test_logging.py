"""Tests for logging configuration."""

import structlog

from okr_coach.core.logging import (
    LOG_FILE_PREFIX,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


class TestLoggingConfiguration:
    """Tests for logging setup."""

    def test_configure_logging_creates_log_file(self, tmp_path):
        """configure_logging() creates the logs directory and a session log file."""
        logs_dir = tmp_path / "logs"
        configure_logging(logs_dir=logs_dir)

        assert logs_dir.is_dir()
        assert len(list(logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"))) == 1

    def test_old_log_files_are_culled(self, tmp_path):
        """Only the most recent log files are retained."""
        for i in range(5):
            (tmp_path / f"{LOG_FILE_PREFIX}2020010{i}_000000.log").write_text("old")

        configure_logging(log_sessions_to_keep=2, logs_dir=tmp_path)

        assert len(list(tmp_path.glob(f"{LOG_FILE_PREFIX}*.log"))) == 2

    def test_get_logger_returns_bound_logger(self):
        """get_logger() returns a logger with the logging methods."""
        logger = get_logger("test_module")

        assert callable(logger.info)
        assert callable(logger.warning)
        assert callable(logger.debug)

    def test_logger_can_bind_context(self, tmp_path):
        """Logger can bind context variables."""
        configure_logging(logs_dir=tmp_path)
        logger = structlog.get_logger("test")
        bound_logger = logger.bind(session_id="test-123", phase="discovery")
        bound_logger.info("test_message")


def test_context_binding(tmp_path):
    """Context variables can be bound and cleared."""
    configure_logging(logs_dir=tmp_path)

    bind_context(request_id="req-123")
    assert structlog.contextvars.get_contextvars()["request_id"] == "req-123"

    clear_context()
    assert "request_id" not in structlog.contextvars.get_contextvars()
