"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the client's failure paths.
Transport and decode failures are never raised out of the inbound read loop;
they are wrapped into one of these classes and surfaced through the ``error``
event instead.

Classes:
  InternalError                - Base for all internal errors.
  NetworkError                 - Stream level failures (connect, read, write).
  NotConnectedError            - A write was attempted without an open stream.
  AlreadyConnectedError        - A second stream was requested while one is open.
  ParsingError                 - A protocol line could not be decoded.
  IdentityNotEstablishedError  - An operation needed the authenticated user
                                 before GLOBALUSERSTATE arrived.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal client errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors.

    This includes connection timeouts, resets and failed writes.
    """


class NotConnectedError(NetworkError):
    """Raised when a line is sent before the stream is open or after it closed."""


class AlreadyConnectedError(NetworkError):
    """Raised when connecting while a stream is still open."""


class ParsingError(InternalError):
    """Exception raised when a protocol line does not match the message syntax.

    The offending line is available as ``data["line"]``.
    """


class IdentityNotEstablishedError(InternalError):
    """Raised when the authenticated user is required but not yet known."""


__all__ = [
    "InternalError",
    "NetworkError",
    "NotConnectedError",
    "AlreadyConnectedError",
    "ParsingError",
    "IdentityNotEstablishedError",
]
