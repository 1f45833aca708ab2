"""
Visualization Layer

Responsibility:
Deterministic geometry for the availability timeline.
No layout logic is left to the renderer.
"""

from .timeline import (
    DisplayWindow, BlockGeometry, RenderedBlock, TimelineRow, TimelineView,
    AvailabilityTimeline, project, project_span, project_time
)

__all__ = [
    'DisplayWindow', 'BlockGeometry', 'RenderedBlock', 'TimelineRow', 'TimelineView',
    'AvailabilityTimeline', 'project', 'project_span', 'project_time'
]
