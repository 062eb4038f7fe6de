"""Custom exceptions for brainlook."""

from __future__ import annotations


class BrainlookError(Exception):
    """Base exception class for all brainlook errors."""


class ProvisioningError(BrainlookError):
    """Raised when creating or joining a room over HTTP fails.

    Attributes:
        status_code: HTTP status of the failed response, or None when no
            response was received (network error, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Description of the failure.
            status_code: HTTP status code, if the server answered.
        """
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(BrainlookError):
    """Raised when an inbound wire message cannot be applied.

    Protocol errors are scoped to a single message; the session keeps going.
    """


class UnknownMessageKind(ProtocolError):
    """Raised when an inbound message carries an unrecognized ``type`` tag.

    Attributes:
        kind: The offending tag (None when the tag was missing).
    """

    def __init__(self, kind: object) -> None:
        """Initialize the exception.

        Args:
            kind: The unrecognized message type.
        """
        super().__init__(f"Unknown message type: {kind!r}")
        self.kind = kind


class MalformedMessageError(ProtocolError):
    """Raised when an inbound message is not valid JSON or has bad fields."""


class TransportError(BrainlookError):
    """Raised when the session socket fails. Terminal for the session."""


class SessionStateError(BrainlookError):
    """Raised when a session operation is invalid for its current state."""
