"""
Utility functions for matchcore.

This module provides:
- Logging setup from LoggingConfig
- A timing context manager for expensive writes
- A clamp helper for bounded scores
"""

import logging
import logging.handlers
import sys
import time

from matchcore.core.config import LoggingConfig

logger = logging.getLogger(__name__)


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """
    Configure the root logger from a LoggingConfig.

    Args:
        config: Logging section of MatchcoreConfig
        verbose: Force DEBUG level regardless of config.level
    """
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.INFO)
    formatter = logging.Formatter(config.format, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if config.file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.file,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("rebuilding clusters"):
            clusterer.fit(data)
    """

    def __init__(self, operation_name: str, log_level: int = logging.DEBUG):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None
        self.elapsed: float = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {self.elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {self.elapsed:.3f}s")
        return False


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to a range."""
    return max(min_val, min(value, max_val))
