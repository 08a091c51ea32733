r"""
Logging configuration module for the tmichat client.

The library itself only emits records through the ``tmichat`` logger; this
module provides the colorlog console setup used by the command line harness
and the structured error logging helpers used by ``tmichat.errors``.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import defaultdict
from typing import Any

import colorlog

_error_log = logging.getLogger("tmichat.errors")


class ErrorAggregator:
    """Counts error occurrences per category for the shutdown summary."""

    def __init__(self):
        self.errors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.lock = threading.Lock()
        self.start_time = time.time()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] = None) -> None:
        """Record an error occurrence with context."""
        with self.lock:
            self.errors[error_type].append(
                {"timestamp": time.time(), "message": message, "context": context or {}}
            )
            # Keep only recent errors (last 1000 per type)
            if len(self.errors[error_type]) > 1000:
                self.errors[error_type] = self.errors[error_type][-1000:]

    def get_error_summary(self) -> dict[str, Any]:
        with self.lock:
            return {
                error_type: {
                    "total_count": len(occurrences),
                    "last_occurrence": occurrences[-1] if occurrences else None,
                }
                for error_type, occurrences in self.errors.items()
            }

    def reset(self) -> None:
        with self.lock:
            self.errors.clear()
            self.start_time = time.time()

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            _error_log.info("No errors recorded in current session")
            return
        _error_log.warning("ERROR SUMMARY REPORT")
        for error_type, stats in summary.items():
            _error_log.warning(f"  {error_type}: {stats['total_count']} total")
            if stats["last_occurrence"]:
                _error_log.warning(f"    Last: {stats['last_occurrence']['message']}")


# Global error aggregator instance
error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException = None,
    context: dict[str, Any] = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and record it in the aggregator.

    Args:
        error_type: Category of the error (e.g., 'network', 'parsing')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"
    if exception:
        structured_message += f" | Exception: {type(exception).__name__}"
    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    _error_log.log(level, structured_message)
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Handles logging configuration cleanly using colorlog.

    Supports environment variable configuration for log levels.
    """

    def __init__(self, config=None):
        self.config = config or {}

    def configure(self):
        """Configure logging with colored output using colorlog.

        Uses environment variables:
        - DEBUG: Set to 'true', '1', or 'yes' for DEBUG level, otherwise INFO
        """
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        logging.basicConfig(level=log_level, handlers=[handler], format="%(message)s")
        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        for h in root_logger.handlers:
            h.setFormatter(formatter)

        if self.config.get("summary_on_exit", True):
            atexit.register(self._log_final_error_summary)
        return handler

    def _log_final_error_summary(self):
        try:
            _error_log.info("Final error summary before shutdown:")
            error_aggregator.log_summary_report()
        except Exception as e:  # noqa: BLE001
            _error_log.error(f"Failed to log final error summary: {e}")


def setup_logging(config=None):
    """Configure console logging for command line use."""
    return LoggerConfigurator(config).configure()
