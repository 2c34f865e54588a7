"""Tests for logging setup and small helpers."""

import logging
import logging.handlers

import pytest

from matchcore.core.config import LoggingConfig
from matchcore.core.utils import PerformanceMonitor, clamp, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_level_from_config(self, restore_root_logger):
        setup_logging(LoggingConfig(level="WARNING"))
        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1

    def test_verbose_forces_debug(self, restore_root_logger):
        setup_logging(LoggingConfig(level="ERROR"), verbose=True)
        assert restore_root_logger.level == logging.DEBUG

    def test_rotating_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "matchcore.log"
        setup_logging(LoggingConfig(file=str(log_file)))

        logging.getLogger("matchcore.test").info("hello file")

        assert any(
            isinstance(h, logging.handlers.RotatingFileHandler)
            for h in restore_root_logger.handlers
        )
        assert "hello file" in log_file.read_text()


class TestPerformanceMonitor:
    def test_records_elapsed(self):
        with PerformanceMonitor("noop") as monitor:
            pass
        assert monitor.elapsed >= 0.0

    def test_does_not_swallow_errors(self):
        with pytest.raises(RuntimeError):
            with PerformanceMonitor("failing"):
                raise RuntimeError("boom")


class TestHelpers:
    def test_clamp(self):
        assert clamp(1.5, 0.0, 1.0) == 1.0
        assert clamp(-0.2, 0.0, 1.0) == 0.0
        assert clamp(0.3, 0.0, 1.0) == 0.3
