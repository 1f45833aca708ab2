"""
API Client Layer

Responsibility:
HTTP access to the scheduling server. The slot computation itself is
opaque to the client.
"""

from .client import (
    SlotifyClient, STATE_PATH, UPLOAD_PATH, MEETING_REQUEST_PATH
)

__all__ = ['SlotifyClient', 'STATE_PATH', 'UPLOAD_PATH', 'MEETING_REQUEST_PATH']
