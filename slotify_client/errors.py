"""
Client Error Taxonomy

Every failure the client can observe is enumerated here.

PROPAGATION:
============
- VALIDATION, TRANSPORT, STREAM terminate an upload as Failed and are
  shown to the user verbatim.
- MALFORMED_FRAME is absorbed (logged, never raised).
- TRUNCATED_STREAM returns an upload to Idle; it is recorded, never raised.
- SELECTION_VIOLATION cannot happen; the selection set prevents it.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Explicit error kinds for client failures."""
    VALIDATION = "validation"              # Server rejected request before streaming
    TRANSPORT = "transport"                # Network failure or bare non-2xx
    STREAM = "stream"                      # Explicit error frame mid-stream
    MALFORMED_FRAME = "malformed_frame"    # Frame without recognizable event
    TRUNCATED_STREAM = "truncated_stream"  # Stream ended with unflushed remainder
    SELECTION_VIOLATION = "selection_violation"


@dataclass(frozen=True)
class ClientError:
    """
    Immutable error representation.

    Errors are data: a Failed lifecycle state carries one of these,
    and the raised exceptions below wrap one.
    """
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None

    @property
    def is_fatal(self) -> bool:
        return self.kind in (ErrorKind.VALIDATION, ErrorKind.TRANSPORT, ErrorKind.STREAM)


class SlotifyError(Exception):
    """Base exception for API client failures."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def error(self) -> ClientError:
        return ClientError(kind=self.kind, message=self.message, status_code=self.status_code)


class ValidationError(SlotifyError):
    """Request rejected before any work was done (server JSON error or local check)."""
    kind = ErrorKind.VALIDATION


class TransportError(SlotifyError):
    """Network failure, timeout, or non-success status without a usable body."""
    kind = ErrorKind.TRANSPORT


class StreamError(SlotifyError):
    """The server reported an error frame while streaming."""
    kind = ErrorKind.STREAM


class InvalidTransition(Exception):
    """Raised when an upload lifecycle is driven from a state that does not allow it."""
    pass


_EXCEPTIONS = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.TRANSPORT: TransportError,
    ErrorKind.STREAM: StreamError,
}


def to_exception(error: ClientError) -> Optional[SlotifyError]:
    """Typed exception for a fatal error record; None for absorbed kinds."""
    if not error.is_fatal:
        return None
    return _EXCEPTIONS[error.kind](error.message, error.status_code)
