"""
Scheduling API Client

Async HTTP access to the scheduling server.

ENDPOINTS:
==========
- GET    /api/state            -> server-held availability (startup restore)
- DELETE /api/state            -> clear server-held availability
- POST   /api/upload           -> multipart upload, event-frame stream back
- POST   /api/meeting-request  -> slot search

Suspension points are the request issue and each stream chunk read.
Nothing here is safe to share between concurrently running uploads;
the session refuses a second attempt while one is active.
"""

from __future__ import annotations
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union
import asyncio
import logging

import httpx

from ..config import ClientConfig
from ..contracts import (
    AvailabilitySnapshot, MeetingRequest, SlotResult, describe_error_payload, parse_slots
)
from ..errors import ClientError, ErrorKind, TransportError, ValidationError
from ..state.lifecycle import UploadLifecycle, UploadState, is_rejection
from ..state.session import SchedulerSession
from ..stream.decoder import StreamFrameDecoder


logger = logging.getLogger(__name__)

STATE_PATH = "/api/state"
UPLOAD_PATH = "/api/upload"
MEETING_REQUEST_PATH = "/api/meeting-request"

UploadSource = Union[str, Path, bytes]
StateListener = Callable[[UploadState], None]


def _json_or_none(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return None


def _raise_for_response(response: httpx.Response):
    """Turn a non-success response into a typed error."""
    if response.is_success:
        return
    payload = _json_or_none(response)
    message = describe_error_payload(payload, response.status_code)
    if isinstance(payload, dict) and payload.get("error"):
        raise ValidationError(message, response.status_code)
    raise TransportError(message, response.status_code)


class SlotifyClient:
    """
    Client for the scheduling server.

    Use as an async context manager, or call ``aclose`` when done.
    A custom ``transport`` replaces the network (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config or ClientConfig()
        self._http = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(
                self._config.timeout_seconds, read=self._config.read_timeout_seconds
            ),
            transport=transport,
        )

    async def __aenter__(self) -> SlotifyClient:
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    # =========================================================================
    # STATE
    # =========================================================================

    async def get_state(self) -> Optional[AvailabilitySnapshot]:
        """Fetch server-held availability; None when the server has no data."""
        response = await self._request("GET", STATE_PATH)
        payload = self._success_json(response)
        if not payload.get("hasData"):
            return None
        return AvailabilitySnapshot.from_payload(payload)

    async def clear_state(self):
        response = await self._request("DELETE", STATE_PATH)
        _raise_for_response(response)

    # =========================================================================
    # UPLOAD
    # =========================================================================

    async def upload_into(
        self,
        session: SchedulerSession,
        source: Optional[UploadSource],
        filename: Optional[str] = None,
        on_state: Optional[StateListener] = None,
    ) -> UploadState:
        """
        Run a full upload attempt against a session.

        The session adopts the new availability when the attempt completes.
        """
        content, name = None, None
        if source is not None:
            # File reads stay off the event loop
            content, name = await asyncio.to_thread(self._read_source, source, filename)
        lifecycle, state = session.start_upload(content is not None)
        if lifecycle is None:
            logger.info("Upload not started: %s", state.message)
            return state

        await self.upload(lifecycle, content, name, on_state=on_state)
        return lifecycle.state

    async def upload(
        self,
        lifecycle: UploadLifecycle,
        content: bytes,
        filename: str = "calendar.csv",
        on_state: Optional[StateListener] = None,
    ) -> UploadLifecycle:
        """
        Stream an upload through a lifecycle that is already Submitting.

        Reads stop as soon as the lifecycle reaches a terminal state.
        """
        files = {"file": (filename, content, "text/csv")}
        with lifecycle.attempt():
            try:
                async with self._http.stream("POST", UPLOAD_PATH, files=files) as response:
                    content_type = response.headers.get("content-type", "")
                    if is_rejection(response.status_code, content_type):
                        await response.aread()
                        lifecycle.reject(response.status_code, _json_or_none(response))
                        self._notify(on_state, lifecycle)
                        return lifecycle

                    lifecycle.start_streaming()
                    self._notify(on_state, lifecycle)
                    await self._consume(response, lifecycle, on_state)
            except httpx.HTTPError as e:
                if lifecycle.is_active:
                    lifecycle.fail(ClientError(ErrorKind.TRANSPORT, str(e) or type(e).__name__))
                    self._notify(on_state, lifecycle)
        return lifecycle

    async def _consume(
        self,
        response: httpx.Response,
        lifecycle: UploadLifecycle,
        on_state: Optional[StateListener],
    ):
        decoder = StreamFrameDecoder()
        async for chunk in response.aiter_bytes():
            for frame in decoder.feed(chunk):
                lifecycle.handle_frame(frame)
                self._notify(on_state, lifecycle)
                if lifecycle.phase.is_terminal:
                    return
        decoder.close()
        lifecycle.end_of_stream()
        self._notify(on_state, lifecycle)

    # =========================================================================
    # SLOT SEARCH
    # =========================================================================

    async def find_slots(self, request: MeetingRequest) -> List[SlotResult]:
        response = await self._request("POST", MEETING_REQUEST_PATH, json=request.to_payload())
        payload = self._success_json(response)
        return parse_slots(payload, request.duration_minutes)

    async def search_into(
        self, session: SchedulerSession, duration_minutes: Optional[int] = None
    ) -> List[SlotResult]:
        """Build a request from the session, search, and highlight the results."""
        request = session.build_meeting_request(duration_minutes)
        slots = await self.find_slots(request)
        session.apply_slot_results(slots)
        return slots

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError(str(e) or type(e).__name__) from e

    def _success_json(self, response: httpx.Response) -> dict:
        _raise_for_response(response)
        payload = _json_or_none(response)
        if not isinstance(payload, dict):
            raise TransportError("Invalid response body", response.status_code)
        return payload

    @staticmethod
    def _read_source(source: UploadSource, filename: Optional[str]) -> Tuple[bytes, str]:
        if isinstance(source, bytes):
            return source, filename or "calendar.csv"
        path = Path(source)
        return path.read_bytes(), filename or path.name

    @staticmethod
    def _notify(listener: Optional[StateListener], lifecycle: UploadLifecycle):
        if listener is not None:
            listener(lifecycle.state)
