"""
Availability Timeline

Responsibility:
Deterministic projection of participant busy intervals onto a bounded
day window.
Input: AvailabilitySnapshot + DisplayWindow (+ selection) -> Output: TimelineView

CLAMPING:
=========
Percentages always lie in [0, 100]. Times outside the window collapse
to the nearest edge, so an interval wholly outside renders as a
zero-width block at that edge.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import time
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Tuple

from ..contracts import (
    AvailabilitySnapshot, ParticipantCategory, SlotResult, TimeInterval, format_time, minutes_of_day
)

if TYPE_CHECKING:
    from ..state.selection import ParticipantSelectionSet


@dataclass(frozen=True)
class DisplayWindow:
    """Fixed hour range [start_hour, end_hour) used to normalize times."""
    start_hour: int = 7
    end_hour: int = 19

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(f"Invalid display window {self.start_hour}-{self.end_hour}")

    @property
    def duration_minutes(self) -> int:
        return (self.end_hour - self.start_hour) * 60

    def hour_labels(self) -> Tuple[str, ...]:
        """Header labels, one per hour including both bounds."""
        return tuple(f"{h:02d}" for h in range(self.start_hour, self.end_hour + 1))


@dataclass(frozen=True)
class BlockGeometry:
    left_percent: float
    width_percent: float

    @property
    def right_percent(self) -> float:
        return self.left_percent + self.width_percent


def project_time(value: time, window: DisplayWindow) -> float:
    """Position of a time of day within the window, in percent."""
    offset = minutes_of_day(value) - window.start_hour * 60
    percent = offset / window.duration_minutes * 100
    return max(0.0, min(100.0, percent))


def project(interval: TimeInterval, window: DisplayWindow) -> BlockGeometry:
    return project_span(interval.start, interval.end, window)


def project_span(start: time, end: time, window: DisplayWindow) -> BlockGeometry:
    """Geometry for start..end; an end at or before the start gives zero width."""
    left = project_time(start, window)
    right = max(left, project_time(end, window))
    return BlockGeometry(left_percent=left, width_percent=right - left)


# =============================================================================
# RENDERABLE VIEW
# =============================================================================

@dataclass(frozen=True)
class RenderedBlock:
    """A busy or available block ready for drawing."""
    start: time
    end: time
    geometry: BlockGeometry

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


@dataclass(frozen=True)
class TimelineRow:
    name: str
    emphasis: ParticipantCategory
    busy: Tuple[RenderedBlock, ...]
    available: Tuple[RenderedBlock, ...]


@dataclass(frozen=True)
class TimelineView:
    """
    Fully calculated timeline.

    Same snapshot + selection + overlays = identical view.
    """
    hour_labels: Tuple[str, ...]
    rows: Tuple[TimelineRow, ...]

    def row(self, name: str) -> Optional[TimelineRow]:
        for row in self.rows:
            if row.name == name:
                return row
        return None

    @property
    def overlay_count(self) -> int:
        return sum(len(r.available) for r in self.rows)


class AvailabilityTimeline:
    """
    Timeline model plus its available-slot overlay.

    The overlay is the only state kept beyond the snapshot; it is
    replaced as a whole by ``highlight_slots`` and dropped by
    ``clear_highlights``.
    """

    def __init__(self, window: Optional[DisplayWindow] = None):
        self._window = window or DisplayWindow()
        self._snapshot = AvailabilitySnapshot.empty()
        self._overlay: Dict[str, Tuple[RenderedBlock, ...]] = {}

    @property
    def window(self) -> DisplayWindow:
        return self._window

    @property
    def snapshot(self) -> AvailabilitySnapshot:
        return self._snapshot

    def load(self, snapshot: AvailabilitySnapshot):
        """Adopt a new snapshot; old overlays no longer apply."""
        self._snapshot = snapshot
        self._overlay = {}

    def highlight_slots(self, slots: Iterable[SlotResult]):
        """Redraw available-slot markers: one per participant row per slot."""
        blocks = tuple(self._block(slot.start, slot.end) for slot in slots)
        self._overlay = {name: blocks for name in self._snapshot.participants}

    def clear_highlights(self):
        self._overlay = {}

    def busy_blocks(self, name: str) -> Tuple[RenderedBlock, ...]:
        return tuple(self._block(i.start, i.end) for i in self._snapshot.busy_for(name))

    def view(self, selection: Optional[ParticipantSelectionSet] = None) -> TimelineView:
        rows = []
        for name in self._snapshot.participants:
            emphasis = selection.category_of(name) if selection is not None else ParticipantCategory.NONE
            rows.append(TimelineRow(
                name=name,
                emphasis=emphasis,
                busy=self.busy_blocks(name),
                available=self._overlay.get(name, ()),
            ))
        return TimelineView(hour_labels=self._window.hour_labels(), rows=tuple(rows))

    def _block(self, start: time, end: time) -> RenderedBlock:
        return RenderedBlock(start=start, end=end, geometry=project_span(start, end, self._window))

