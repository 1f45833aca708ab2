"""
Upload Lifecycle
================

State machine for one upload attempt.

TRANSITIONS:
============
    Idle       -> Submitting   begin() with a file present
    Submitting -> Failed       non-success or JSON-typed response
    Submitting -> Streaming    success with a streaming body
    Streaming  -> Streaming    progress frame (status message only)
    Streaming  -> Completed    done frame
    Streaming  -> Failed       error frame, bad payload or network failure
    Streaming  -> Idle         stream closed without a done frame (nothing
                               adopted, recorded as a non-fatal error)

CLEANUP:
========
Leaving Submitting or Streaming re-enables the trigger control and restores
its label. ``attempt()`` extends that to every exit path, including
cancellation and unexpected exceptions.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Mapping, Optional
import logging

from ..contracts import AvailabilitySnapshot, EventFrame, FrameType, describe_error_payload
from ..errors import ClientError, ErrorKind, InvalidTransition, to_exception
from ..presentation.viewmodels import TriggerControl, BUSY_UPLOAD_LABEL


logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "Select a file first"
TRUNCATED_MESSAGE = "Upload ended before completion"


class UploadPhase(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadPhase.COMPLETED, UploadPhase.FAILED)

    @property
    def is_active(self) -> bool:
        return self in (UploadPhase.SUBMITTING, UploadPhase.STREAMING)


@dataclass(frozen=True)
class UploadState:
    """Snapshot of an attempt, as shown to the user."""
    phase: UploadPhase
    message: str = ""
    snapshot: Optional[AvailabilitySnapshot] = None
    error: Optional[ClientError] = None

    def raise_for_error(self):
        """Raise for a fatal error; absorbed kinds such as truncation pass."""
        if self.error is None:
            return
        exc = to_exception(self.error)
        if exc is not None:
            raise exc


def is_rejection(status_code: int, content_type: str) -> bool:
    """True when the server answered without starting a stream."""
    success = 200 <= status_code < 300
    return not success or "application/json" in (content_type or "").lower()


class UploadLifecycle:
    """
    Drives a single upload attempt.

    Created fresh per attempt. ``on_complete`` receives the adopted
    snapshot when the attempt reaches Completed.
    """

    def __init__(
        self,
        control: Optional[TriggerControl] = None,
        on_complete: Optional[Callable[[AvailabilitySnapshot], None]] = None,
    ):
        self._control = control if control is not None else TriggerControl()
        self._on_complete = on_complete
        self._state = UploadState(UploadPhase.IDLE)
        self._history: List[UploadPhase] = [UploadPhase.IDLE]
        self._saved_label: Optional[str] = None

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def phase(self) -> UploadPhase:
        return self._state.phase

    @property
    def message(self) -> str:
        return self._state.message

    @property
    def error(self) -> Optional[ClientError]:
        return self._state.error

    @property
    def snapshot(self) -> Optional[AvailabilitySnapshot]:
        return self._state.snapshot

    @property
    def control(self) -> TriggerControl:
        return self._control

    @property
    def history(self) -> List[UploadPhase]:
        return list(self._history)

    @property
    def is_active(self) -> bool:
        return self.phase.is_active

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def begin(self, has_file: bool) -> bool:
        """Idle -> Submitting. Stays Idle with a validation message when no file is given."""
        self._require(UploadPhase.IDLE)
        if not has_file:
            self._state = UploadState(UploadPhase.IDLE, message=NO_FILE_MESSAGE)
            return False

        self._saved_label = self._control.label
        self._control.disabled = True
        self._control.label = BUSY_UPLOAD_LABEL
        self._move(UploadPhase.SUBMITTING, BUSY_UPLOAD_LABEL)
        return True

    def reject(self, status_code: int, payload: Optional[Mapping] = None):
        """Submitting -> Failed for a response that never started streaming."""
        self._require(UploadPhase.SUBMITTING)
        has_error = isinstance(payload, Mapping) and bool(payload.get("error"))
        kind = ErrorKind.VALIDATION if has_error else ErrorKind.TRANSPORT
        self.fail(ClientError(kind, describe_error_payload(payload, status_code), status_code))

    def start_streaming(self):
        """Submitting -> Streaming."""
        self._require(UploadPhase.SUBMITTING)
        self._move(UploadPhase.STREAMING, self._state.message)

    def handle_frame(self, frame: EventFrame):
        """Apply one decoded frame while Streaming."""
        self._require(UploadPhase.STREAMING)
        kind = frame.kind

        if kind is FrameType.UNKNOWN:
            logger.debug("Ignoring unrecognized frame type %r", frame.type)
            return

        try:
            payload = frame.json()
            if kind is FrameType.PROGRESS:
                message = str(payload["message"])
            elif kind is FrameType.DONE:
                snapshot = AvailabilitySnapshot.from_payload(payload)
            else:
                message = str(payload.get("error") or "Unknown error")
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning("Could not parse %s frame: %s", frame.type, e)
            self.fail(ClientError(ErrorKind.STREAM, str(e) or type(e).__name__))
            return

        if kind is FrameType.PROGRESS:
            self._progress(message)
        elif kind is FrameType.DONE:
            self._complete(snapshot)
        else:
            self.fail(ClientError(ErrorKind.STREAM, message))

    def end_of_stream(self):
        """
        The server closed the stream.

        Without a done frame the attempt is abandoned back to Idle: the
        control is restored, nothing is adopted, and the last status
        message stays. The truncation is kept as a non-fatal error.
        """
        if self.phase is not UploadPhase.STREAMING:
            return
        logger.debug("Upload stream ended without a done frame")
        error = ClientError(ErrorKind.TRUNCATED_STREAM, TRUNCATED_MESSAGE)
        self._state = UploadState(UploadPhase.IDLE, message=self._state.message, error=error)
        self._history.append(UploadPhase.IDLE)
        self._release()

    def fail(self, error: ClientError):
        """Submitting|Streaming -> Failed."""
        if not self.phase.is_active:
            raise InvalidTransition(f"Cannot fail upload from {self.phase.value}")
        logger.warning("Upload failed (%s): %s", error.kind.value, error.message)
        self._state = UploadState(UploadPhase.FAILED, message=error.message, error=error)
        self._history.append(UploadPhase.FAILED)
        self._release()

    @contextmanager
    def attempt(self) -> Iterator[UploadLifecycle]:
        """
        Scope an in-flight attempt.

        Any exception escaping the block fails the attempt before it
        propagates; the control is restored on every exit.
        """
        try:
            yield self
        except BaseException as e:
            if self.is_active:
                self.fail(ClientError(ErrorKind.TRANSPORT, str(e) or type(e).__name__))
            raise
        finally:
            if self.is_active:
                self.end_of_stream()
            if self.is_active:
                self.fail(ClientError(ErrorKind.TRANSPORT, "Upload interrupted"))
            self._release()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _progress(self, message: str):
        logger.debug("Upload progress: %s", message)
        self._control.label = message
        self._state = UploadState(UploadPhase.STREAMING, message=message)

    def _complete(self, snapshot: AvailabilitySnapshot):
        self._state = UploadState(UploadPhase.COMPLETED, message="Upload complete", snapshot=snapshot)
        self._history.append(UploadPhase.COMPLETED)
        logger.info("Upload completed with %d participants", len(snapshot.participants))
        try:
            if self._on_complete is not None:
                self._on_complete(snapshot)
        finally:
            self._release()

    def _move(self, phase: UploadPhase, message: str):
        logger.info("Upload %s -> %s", self.phase.value, phase.value)
        self._state = UploadState(phase, message=message)
        self._history.append(phase)

    def _require(self, phase: UploadPhase):
        if self.phase is not phase:
            raise InvalidTransition(f"Expected {phase.value}, upload is {self.phase.value}")

    def _release(self):
        if self._saved_label is None:
            return
        self._control.disabled = False
        self._control.label = self._saved_label
        self._saved_label = None
