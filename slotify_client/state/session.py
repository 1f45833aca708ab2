"""
Scheduler Session

Single owner of the client's process-wide state: availability,
participant selection, meeting settings, timeline overlays and the
upload trigger.

DESIGN:
=======
1. Availability is replaced wholesale, never patched
2. A changed participant list invalidates the selection
3. Slot requests are built from the selection set, never from widgets
4. At most one upload attempt is in flight
"""

from __future__ import annotations
from typing import List, Optional, Tuple
import logging

from ..config import ClientConfig
from ..contracts import AvailabilitySnapshot, MeetingRequest, ParticipantCategory, SlotResult
from ..presentation.viewmodels import TriggerControl
from ..visualization.timeline import AvailabilityTimeline, DisplayWindow, TimelineView
from .lifecycle import UploadLifecycle, UploadPhase, UploadState
from .selection import ParticipantSelectionSet
from .settings import BlackoutList, BufferSetting


logger = logging.getLogger(__name__)

UPLOAD_IN_PROGRESS_MESSAGE = "Upload already in progress"


class SchedulerSession:
    """Controller for one scheduling page."""

    def __init__(self, config: Optional[ClientConfig] = None):
        self._config = config or ClientConfig()
        self._snapshot = AvailabilitySnapshot.empty()
        self._selection = ParticipantSelectionSet()
        self._blackouts = BlackoutList()
        self._buffer = BufferSetting(self._config.default_buffer_minutes)
        self._timeline = AvailabilityTimeline(
            DisplayWindow(self._config.day_start_hour, self._config.day_end_hour)
        )
        self._control = TriggerControl()
        self._upload: Optional[UploadLifecycle] = None
        self._results: Tuple[SlotResult, ...] = ()

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    @property
    def snapshot(self) -> AvailabilitySnapshot:
        return self._snapshot

    @property
    def participants(self) -> Tuple[str, ...]:
        return self._snapshot.participants

    @property
    def selection(self) -> ParticipantSelectionSet:
        return self._selection

    @property
    def blackouts(self) -> BlackoutList:
        return self._blackouts

    @property
    def buffer(self) -> BufferSetting:
        return self._buffer

    @property
    def control(self) -> TriggerControl:
        return self._control

    @property
    def results(self) -> Tuple[SlotResult, ...]:
        return self._results

    @property
    def timeline(self) -> AvailabilityTimeline:
        return self._timeline

    @property
    def has_data(self) -> bool:
        return not self._snapshot.is_empty

    # =========================================================================
    # AVAILABILITY
    # =========================================================================

    def adopt(self, snapshot: AvailabilitySnapshot):
        """Replace availability wholesale."""
        if snapshot.participants != self._snapshot.participants:
            self._selection.reset(snapshot.participants)
        self._snapshot = snapshot
        self._timeline.load(snapshot)
        self._results = ()
        logger.info("Loaded availability for %d participants", len(snapshot.participants))

    def restore(self, snapshot: Optional[AvailabilitySnapshot]):
        """Apply server-held state at startup; None means the server has none."""
        if snapshot is not None:
            self.adopt(snapshot)

    def reset(self):
        """Back to empty, in lockstep with ``DELETE state``."""
        self._snapshot = AvailabilitySnapshot.empty()
        self._selection.reset(())
        self._timeline.load(self._snapshot)
        self._results = ()
        logger.info("Session state cleared")

    # =========================================================================
    # UPLOAD
    # =========================================================================

    def start_upload(self, has_file: bool) -> Tuple[Optional[UploadLifecycle], UploadState]:
        """
        Open a new upload attempt.

        Returns the lifecycle in Submitting, or None with the reason when
        no file was given or another attempt is still in flight.
        """
        if self._upload is not None and self._upload.is_active:
            return None, UploadState(self._upload.phase, message=UPLOAD_IN_PROGRESS_MESSAGE)

        lifecycle = UploadLifecycle(self._control, on_complete=self.adopt)
        if not lifecycle.begin(has_file):
            return None, lifecycle.state
        self._upload = lifecycle
        return lifecycle, lifecycle.state

    @property
    def upload_phase(self) -> UploadPhase:
        return self._upload.phase if self._upload is not None else UploadPhase.IDLE

    # =========================================================================
    # SLOT SEARCH
    # =========================================================================

    def toggle(self, name: str, category: ParticipantCategory, checked: bool = True):
        self._selection.toggle(name, category, checked)

    def build_meeting_request(self, duration_minutes: Optional[int] = None) -> MeetingRequest:
        duration = self._config.default_duration_minutes if duration_minutes is None else duration_minutes
        return MeetingRequest(
            required=self._selection.ordered(ParticipantCategory.REQUIRED),
            optional=self._selection.ordered(ParticipantCategory.OPTIONAL),
            duration_minutes=duration,
            buffer_minutes=self._buffer.minutes,
            blackouts=self._blackouts.items,
        )

    def apply_slot_results(self, results: List[SlotResult]):
        self._results = tuple(results)
        self._timeline.highlight_slots(self._results)

    def timeline_view(self) -> TimelineView:
        return self._timeline.view(self._selection)
