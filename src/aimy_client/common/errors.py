"""Exceptions raised by the AIMY client."""
from __future__ import annotations


class AimyError(Exception):
    """Base exception for application-level errors."""


class ConfigError(AimyError):
    """Raised when configuration cannot be loaded or validated."""


class ClientError(AimyError):
    """Base for failures while sending a request or reading its stream."""


class TransportError(ClientError):
    """Connection-level failure: DNS, refused connection, timeout, broken body."""


class StatusError(ClientError):
    """The server answered with an HTTP status of 400 or above."""

    def __init__(self, status_code: int, reason: str = "", message: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.message = message
        text = f"{status_code} {reason}".strip()
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class DecodeError(ClientError):
    """A response line could not be decoded into a stream record."""


class BufferExceededError(DecodeError):
    """A response line does not fit in the decoder's line buffer."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"token too long: line exceeds max buffer size of {limit} bytes")


class ServerError(ClientError):
    """The server reported a failure through the ``error`` field of a record."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
