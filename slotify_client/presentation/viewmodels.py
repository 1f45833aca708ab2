"""
Presentation Contracts

Responsibility:
Headless view models for the widgets the scheduling page shows.
A rendering layer reads these; it never reads back from its widgets.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..contracts import SlotResult, TimeInterval, format_time


DEFAULT_UPLOAD_LABEL = "Upload"
BUSY_UPLOAD_LABEL = "Uploading..."


@dataclass
class TriggerControl:
    """
    The upload button.

    Mutable: the upload lifecycle disables it and rewrites its label
    while an attempt is in flight, then restores both.
    """
    label: str = DEFAULT_UPLOAD_LABEL
    disabled: bool = False


@dataclass(frozen=True)
class SlotCardViewModel:
    """One entry of the slot result list."""
    time_label: str
    available_optional: Tuple[str, ...]
    unavailable_optional: Tuple[str, ...]

    @property
    def attendee_summary(self) -> str:
        parts = []
        if self.available_optional:
            parts.append("✓ " + ", ".join(self.available_optional))
        if self.unavailable_optional:
            parts.append("✗ " + ", ".join(self.unavailable_optional))
        return " ".join(parts)


@dataclass(frozen=True)
class ResultListViewModel:
    """The slot search result panel."""
    header: str
    cards: Tuple[SlotCardViewModel, ...]
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.cards


def build_result_list(slots: Sequence[SlotResult], required_count: int) -> ResultListViewModel:
    if not slots:
        return ResultListViewModel(
            header="No available slots found for all required participants",
            cards=(),
        )
    cards = tuple(
        SlotCardViewModel(
            time_label=format_time(slot.start),
            available_optional=slot.available_optional,
            unavailable_optional=slot.unavailable_optional,
        )
        for slot in slots
    )
    return ResultListViewModel(
        header=(
            f"Found {len(slots)} available slot(s) for "
            f"{required_count} required participant(s):"
        ),
        cards=cards,
    )


def failed_result_list(message: str) -> ResultListViewModel:
    return ResultListViewModel(header="", cards=(), error=f"Request failed: {message}")


def blackout_labels(blackouts: Sequence[TimeInterval]) -> List[str]:
    """Chip labels for the blocked-time list."""
    if not blackouts:
        return ["No blocked times configured"]
    return [f"{format_time(b.start)} - {format_time(b.end)}" for b in blackouts]
