"""
Slotify Scheduling Client

Client-side logic for the meeting scheduler: upload stream decoding,
upload lifecycle, availability timeline and participant selection.
"""

from .config import ClientConfig
from .contracts import (
    TimeInterval, EventFrame, FrameType, AvailabilitySnapshot,
    ParticipantCategory, MeetingRequest, SlotResult
)
from .errors import (
    ErrorKind, ClientError, SlotifyError, ValidationError, TransportError,
    StreamError, InvalidTransition, to_exception
)

__version__ = "0.1.0"

__all__ = [
    'ClientConfig',
    'TimeInterval', 'EventFrame', 'FrameType', 'AvailabilitySnapshot',
    'ParticipantCategory', 'MeetingRequest', 'SlotResult',
    'ErrorKind', 'ClientError', 'SlotifyError', 'ValidationError', 'TransportError',
    'StreamError', 'InvalidTransition', 'to_exception',
]
