"""Error types and error logging helpers."""

from .handling import classify_error, log_error  # noqa: F401
from .internal import (  # noqa: F401
    AlreadyConnectedError,
    IdentityNotEstablishedError,
    InternalError,
    NetworkError,
    NotConnectedError,
    ParsingError,
)

__all__ = [
    "InternalError",
    "NetworkError",
    "NotConnectedError",
    "AlreadyConnectedError",
    "ParsingError",
    "IdentityNotEstablishedError",
    "classify_error",
    "log_error",
]
