"""
Client State Layer

Responsibility:
Own and mutate the client's in-process state.

PRINCIPLES:
1. One controller (SchedulerSession) owns everything
2. Upload attempts are explicit state machines
3. Selection is the source of truth; rendering is a projection of it
"""

from .lifecycle import UploadLifecycle, UploadPhase, UploadState, is_rejection
from .selection import ParticipantSelectionSet
from .settings import BlackoutList, BufferSetting
from .session import SchedulerSession, UPLOAD_IN_PROGRESS_MESSAGE

__all__ = [
    'UploadLifecycle', 'UploadPhase', 'UploadState', 'is_rejection',
    'ParticipantSelectionSet',
    'BlackoutList', 'BufferSetting',
    'SchedulerSession', 'UPLOAD_IN_PROGRESS_MESSAGE'
]
