from __future__ import annotations

import logging

from ..logging_config import log_structured_error
from .internal import (
    IdentityNotEstablishedError,
    InternalError,
    NetworkError,
    ParsingError,
)


def classify_error(error: BaseException) -> str:
    """Map an exception onto the error category used in structured logs."""
    if isinstance(error, NetworkError | OSError | ConnectionError):
        return "network"
    if isinstance(error, ParsingError):
        return "parsing"
    if isinstance(error, IdentityNotEstablishedError):
        return "identity"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level (default: ERROR).
    """
    merged: dict = {}
    if isinstance(error, InternalError):
        merged.update(error.data)
    if context:
        merged.update(context)
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {error}",
        exception=error,
        context=merged or None,
        level=level,
    )
