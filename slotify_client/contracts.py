"""
Scheduling Client Contracts

Immutable data structures shared by every layer of the client.

BOUNDARY: Wire <-> Client
All server payloads enter the client through the ``from_payload``
constructors here, and every request body leaves through ``to_payload``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple
import json

from .errors import ValidationError


MINUTES_PER_DAY = 24 * 60
MIN_REQUIRED_PARTICIPANTS = 2


# =============================================================================
# TIME OF DAY
# =============================================================================

def parse_time(value: str) -> time:
    """Parse an ``HH:MM`` or ``HH:MM:SS`` wire time."""
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid time of day: {value!r}")
    return time.fromisoformat(value)


def format_time(value: time) -> str:
    if value.second:
        return value.strftime("%H:%M:%S")
    return value.strftime("%H:%M")


def minutes_of_day(value: time) -> float:
    """Minutes elapsed since midnight (seconds as a fraction)."""
    return value.hour * 60 + value.minute + value.second / 60


def add_minutes(value: time, minutes: int) -> time:
    """Shift a time of day forward, saturating at the end of the day."""
    total = value.hour * 60 + value.minute + minutes
    if total >= MINUTES_PER_DAY:
        return time.max.replace(microsecond=0)
    return time(total // 60, total % 60, value.second)


@dataclass(frozen=True, order=True)
class TimeInterval:
    """
    A busy period or a blackout window within one day.

    INVARIANT: start < end
    """
    start: time
    end: time

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(
                f"End time {format_time(self.end)} must be after start time {format_time(self.start)}"
            )

    @classmethod
    def parse(cls, start: str, end: str) -> TimeInterval:
        return cls(parse_time(start), parse_time(end))

    @classmethod
    def from_payload(cls, payload: Mapping) -> TimeInterval:
        return cls.parse(payload["start"], payload["end"])

    def to_payload(self) -> Dict[str, str]:
        return {"start": format_time(self.start), "end": format_time(self.end)}

    @property
    def duration_minutes(self) -> float:
        return minutes_of_day(self.end) - minutes_of_day(self.start)

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


# Participant name -> ordered busy intervals
ParticipantAvailability = Dict[str, Tuple[TimeInterval, ...]]


# =============================================================================
# EVENT FRAMES
# =============================================================================

class FrameType(Enum):
    """Recognized event frame types on the upload stream."""
    PROGRESS = "progress"
    DONE = "done"
    ERROR = "error"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, value: str) -> FrameType:
        try:
            member = cls(value)
        except ValueError:
            return cls.UNKNOWN
        return member


@dataclass(frozen=True)
class EventFrame:
    """
    One blank-line delimited block of the upload stream.

    A block without an ``event:`` line has an empty type; consumers
    treat it as unrecognized.
    """
    type: str = ""
    data: str = ""

    @property
    def kind(self) -> FrameType:
        return FrameType.of(self.type)

    def json(self):
        """Decode the payload. Raises ``json.JSONDecodeError`` on bad data."""
        return json.loads(self.data)


# =============================================================================
# AVAILABILITY
# =============================================================================

@dataclass(frozen=True)
class AvailabilitySnapshot:
    """
    Participants and their busy intervals, as published by the server.

    Replaced wholesale on each successful upload.
    """
    busy_slots: ParticipantAvailability = field(default_factory=dict)
    participants: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping) -> AvailabilitySnapshot:
        raw_slots = payload.get("busySlots") or {}
        busy_slots = {
            name: tuple(TimeInterval.from_payload(slot) for slot in slots)
            for name, slots in raw_slots.items()
        }
        participants = tuple(payload.get("participants") or ())
        for name in participants:
            busy_slots.setdefault(name, ())
        return cls(busy_slots=busy_slots, participants=participants)

    @classmethod
    def empty(cls) -> AvailabilitySnapshot:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.participants

    def busy_for(self, name: str) -> Tuple[TimeInterval, ...]:
        return self.busy_slots.get(name, ())


# =============================================================================
# PARTICIPANT SELECTION
# =============================================================================

class ParticipantCategory(Enum):
    """Classification of a participant for slot search."""
    NONE = "none"
    REQUIRED = "required"
    OPTIONAL = "optional"


# =============================================================================
# SLOT SEARCH
# =============================================================================

@dataclass(frozen=True)
class MeetingRequest:
    """Body of a slot-search request."""
    required: Tuple[str, ...]
    optional: Tuple[str, ...]
    duration_minutes: int
    buffer_minutes: int = 0
    blackouts: Tuple[TimeInterval, ...] = ()

    def __post_init__(self):
        if len(self.required) < MIN_REQUIRED_PARTICIPANTS:
            raise ValidationError(
                f"Select at least {MIN_REQUIRED_PARTICIPANTS} required participants"
            )
        if self.duration_minutes <= 0:
            raise ValidationError("Meeting duration must be positive")
        if self.buffer_minutes < 0:
            raise ValidationError("Buffer must be non-negative")

    def to_payload(self) -> dict:
        return {
            "required": list(self.required),
            "optional": list(self.optional),
            "durationMinutes": self.duration_minutes,
            "bufferMinutes": self.buffer_minutes,
            "blackouts": [b.to_payload() for b in self.blackouts],
        }


@dataclass(frozen=True)
class SlotResult:
    """
    A server-computed available slot.

    A derived end saturates at 23:59:59, so a slot starting there has zero
    length and no valid ``interval``; the timeline draws it zero-width.
    """
    start: time
    end: time
    available_optional: Tuple[str, ...] = ()
    unavailable_optional: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping, duration_minutes: int) -> SlotResult:
        start = parse_time(payload["start"])
        raw_end = payload.get("end")
        end = parse_time(raw_end) if raw_end else add_minutes(start, duration_minutes)
        return cls(
            start=start,
            end=end,
            available_optional=tuple(payload.get("availableOptional") or ()),
            unavailable_optional=tuple(payload.get("unavailableOptional") or ()),
        )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)


def parse_slots(payload: Mapping, duration_minutes: int) -> List[SlotResult]:
    """Decode a ``{slots: [...]}`` response body."""
    return [SlotResult.from_payload(s, duration_minutes) for s in payload.get("slots") or ()]


def describe_error_payload(payload: Optional[Mapping], status_code: int) -> str:
    """Message from a JSON ``{error}`` body, synthesized from the status if absent."""
    if isinstance(payload, Mapping) and payload.get("error"):
        return str(payload["error"])
    return f"Server error: {status_code}"
