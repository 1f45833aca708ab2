"""
Presentation Layer

Pure view models. No I/O, no business rules.
"""

from .viewmodels import (
    TriggerControl, SlotCardViewModel, ResultListViewModel,
    build_result_list, failed_result_list, blackout_labels,
    DEFAULT_UPLOAD_LABEL, BUSY_UPLOAD_LABEL
)

__all__ = [
    'TriggerControl', 'SlotCardViewModel', 'ResultListViewModel',
    'build_result_list', 'failed_result_list', 'blackout_labels',
    'DEFAULT_UPLOAD_LABEL', 'BUSY_UPLOAD_LABEL'
]
