"""
Meeting Settings

Blocked times and the between-meeting buffer, as edited by the user
before a slot search.
"""

from __future__ import annotations
from typing import List, Optional, Tuple

from ..contracts import TimeInterval, parse_time
from ..errors import ValidationError


class BlackoutList:
    """Ordered, duplicate-free list of blocked time windows."""

    def __init__(self):
        self._items: List[TimeInterval] = []

    def add(self, start: Optional[str], end: Optional[str]) -> TimeInterval:
        if not start or not end:
            raise ValidationError("Please select both start and end times")
        start_time, end_time = parse_time(start), parse_time(end)
        if start_time >= end_time:
            raise ValidationError("End time must be after start time")
        interval = TimeInterval(start_time, end_time)
        if interval in self._items:
            raise ValidationError("This blocked time already exists")
        self._items.append(interval)
        return interval

    def remove(self, index: int) -> TimeInterval:
        if not 0 <= index < len(self._items):
            raise IndexError(f"No blocked time at position {index}")
        return self._items.pop(index)

    def clear(self):
        self._items.clear()

    @property
    def items(self) -> Tuple[TimeInterval, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(tuple(self._items))


class BufferSetting:
    """
    Minutes kept free between meetings.

    Turning "no buffer" on zeroes the value; turning it off restores
    whatever was set before.
    """

    def __init__(self, minutes: int = 10):
        if minutes < 0:
            raise ValidationError("Buffer must be non-negative")
        self._minutes = minutes
        self._disabled = False

    @property
    def minutes(self) -> int:
        return 0 if self._disabled else self._minutes

    @property
    def disabled(self) -> bool:
        return self._disabled

    def set(self, minutes: int):
        if minutes < 0:
            raise ValidationError("Buffer must be non-negative")
        self._minutes = minutes
        self._disabled = False

    def toggle_no_buffer(self, no_buffer: bool):
        self._disabled = no_buffer
