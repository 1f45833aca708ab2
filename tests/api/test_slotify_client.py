"""
API Client Tests

HTTP behavior against ``httpx.MockTransport``; no network is used.

TEST CATEGORIES:
================
1. Upload stream handling (chunked frames, rejection, failures)
2. State restore/clear
3. Slot search request/response
"""

import asyncio
import json
import threading

import httpx
import pytest

from slotify_client.api import SlotifyClient
from slotify_client.config import ClientConfig
from slotify_client.contracts import AvailabilitySnapshot, MeetingRequest, ParticipantCategory
from slotify_client.errors import ErrorKind, TransportError, ValidationError
from slotify_client.presentation import TriggerControl
from slotify_client.state import SchedulerSession, UploadLifecycle, UploadPhase


CONFIG = ClientConfig(base_url="http://slotify.test")
SSE = {"content-type": "text/event-stream"}

DONE_BODY = (
    'event: progress\ndata: {"message":"Parsing calendar"}\n\n'
    'event: progress\ndata: {"message":"Building schedules"}\n\n'
    'event: done\ndata: {"busySlots":{"Alice":[{"start":"09:00","end":"10:00"}]},'
    '"participants":["Alice","Bob"]}\n\n'
).encode()


def chunks_of(raw, size):
    async def body():
        for i in range(0, len(raw), size):
            yield raw[i:i + size]
    return body()


def run(coro):
    return asyncio.run(coro)


async def with_client(handler, action):
    async with SlotifyClient(CONFIG, transport=httpx.MockTransport(handler)) as client:
        return await action(client)


def streaming_lifecycle():
    control = TriggerControl(label="Upload")
    lifecycle = UploadLifecycle(control)
    lifecycle.begin(has_file=True)
    return lifecycle, control


# =============================================================================
# UPLOAD
# =============================================================================

class TestUpload:

    def test_streamed_upload_completes(self):
        requests = []

        async def handler(request):
            requests.append((request.method, request.url.path, await request.aread()))
            return httpx.Response(200, headers=SSE, content=chunks_of(DONE_BODY, 7))

        lifecycle, control = streaming_lifecycle()
        seen = []
        run(with_client(handler, lambda c: c.upload(lifecycle, b"csv-bytes", on_state=seen.append)))

        method, path, body = requests[0]
        assert (method, path) == ("POST", "/api/upload")
        assert b'name="file"' in body and b"csv-bytes" in body

        assert lifecycle.phase is UploadPhase.COMPLETED
        assert lifecycle.snapshot.participants == ("Alice", "Bob")
        assert [s.message for s in seen if s.phase is UploadPhase.STREAMING][-2:] == [
            "Parsing calendar", "Building schedules",
        ]
        assert control.disabled is False and control.label == "Upload"

    def test_validation_rejection(self):
        def handler(request):
            return httpx.Response(400, json={"error": "bad file"})

        lifecycle, control = streaming_lifecycle()
        run(with_client(handler, lambda c: c.upload(lifecycle, b"x")))

        assert lifecycle.phase is UploadPhase.FAILED
        assert lifecycle.message == "bad file"
        assert lifecycle.error.kind is ErrorKind.VALIDATION
        assert control.disabled is False

    def test_json_success_is_rejection(self):
        def handler(request):
            return httpx.Response(200, json={"error": "No file uploaded"})

        lifecycle, _ = streaming_lifecycle()
        run(with_client(handler, lambda c: c.upload(lifecycle, b"x")))

        assert lifecycle.phase is UploadPhase.FAILED
        assert lifecycle.message == "No file uploaded"

    def test_bare_server_error(self):
        def handler(request):
            return httpx.Response(500, text="oops")

        lifecycle, _ = streaming_lifecycle()
        run(with_client(handler, lambda c: c.upload(lifecycle, b"x")))

        assert lifecycle.message == "Server error: 500"
        assert lifecycle.error.kind is ErrorKind.TRANSPORT

    def test_error_frame_stops_reading(self):
        body = (
            b'event: progress\ndata: {"message":"Parsing"}\n\n'
            b'event: error\ndata: {"error":"Row 3: invalid time"}\n\n'
            b'event: done\ndata: {"busySlots":{},"participants":["X"]}\n\n'
        )

        def handler(request):
            return httpx.Response(200, headers=SSE, content=body)

        lifecycle, control = streaming_lifecycle()
        run(with_client(handler, lambda c: c.upload(lifecycle, b"x")))

        assert lifecycle.phase is UploadPhase.FAILED
        assert lifecycle.message == "Row 3: invalid time"
        assert lifecycle.error.kind is ErrorKind.STREAM
        assert lifecycle.snapshot is None
        assert control.disabled is False

    def test_network_failure_mid_stream(self):
        async def body():
            yield b'event: progress\ndata: {"message":"Parsing"}\n\n'
            raise httpx.ReadError("connection reset")

        def handler(request):
            return httpx.Response(200, headers=SSE, content=body())

        lifecycle, control = streaming_lifecycle()
        run(with_client(handler, lambda c: c.upload(lifecycle, b"x")))

        assert lifecycle.phase is UploadPhase.FAILED
        assert lifecycle.error.kind is ErrorKind.TRANSPORT
        assert "connection reset" in lifecycle.message
        assert control.disabled is False

    def test_connect_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        lifecycle, control = streaming_lifecycle()
        run(with_client(handler, lambda c: c.upload(lifecycle, b"x")))

        assert lifecycle.phase is UploadPhase.FAILED
        assert lifecycle.error.kind is ErrorKind.TRANSPORT
        assert control.disabled is False

    def test_stream_without_done_is_truncated(self):
        body = b'event: progress\ndata: {"message":"Parsing"}\n\nevent: done\ndata: {"busySlots":{}'

        def handler(request):
            return httpx.Response(200, headers=SSE, content=body)

        lifecycle, control = streaming_lifecycle()
        run(with_client(handler, lambda c: c.upload(lifecycle, b"x")))

        assert lifecycle.phase is UploadPhase.IDLE
        assert lifecycle.message == "Parsing"
        assert lifecycle.error.kind is ErrorKind.TRUNCATED_STREAM
        assert control.disabled is False

    def test_cancellation_restores_control(self):
        async def scenario():
            second_read = asyncio.Event()

            async def body():
                yield b'event: progress\ndata: {"message":"Parsing"}\n\n'
                second_read.set()
                await asyncio.Event().wait()

            def handler(request):
                return httpx.Response(200, headers=SSE, content=body())

            lifecycle, control = streaming_lifecycle()
            async with SlotifyClient(CONFIG, transport=httpx.MockTransport(handler)) as client:
                task = asyncio.create_task(client.upload(lifecycle, b"x"))
                await second_read.wait()
                assert lifecycle.message == "Parsing"
                task.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await task
            return lifecycle, control

        lifecycle, control = run(scenario())

        assert lifecycle.phase is UploadPhase.FAILED
        assert control.disabled is False
        assert control.label == "Upload"


class TestUploadInto:

    def test_session_adopts_result(self, tmp_path):
        calendar = tmp_path / "team.csv"
        calendar.write_bytes(b"name,start,end\n")
        names = []

        async def handler(request):
            body = await request.aread()
            names.append(b'filename="team.csv"' in body)
            return httpx.Response(200, headers=SSE, content=DONE_BODY)

        session = SchedulerSession(CONFIG)
        session.toggle("Ghost", ParticipantCategory.REQUIRED)
        state = run(with_client(handler, lambda c: c.upload_into(session, calendar)))

        assert names == [True]
        assert state.phase is UploadPhase.COMPLETED
        assert session.participants == ("Alice", "Bob")
        assert session.selection.required_names() == frozenset()
        assert len(session.timeline_view().row("Alice").busy) == 1

    def test_file_is_read_off_the_event_loop(self, tmp_path, monkeypatch):
        calendar = tmp_path / "team.csv"
        calendar.write_bytes(b"name,start,end\n")
        threads = {}
        read_source = SlotifyClient._read_source

        def recording_read(source, filename):
            threads["read"] = threading.get_ident()
            return read_source(source, filename)

        def handler(request):
            threads["loop"] = threading.get_ident()
            return httpx.Response(200, headers=SSE, content=DONE_BODY)

        monkeypatch.setattr(SlotifyClient, "_read_source", staticmethod(recording_read))
        state = run(with_client(handler, lambda c: c.upload_into(SchedulerSession(CONFIG), calendar)))

        assert state.phase is UploadPhase.COMPLETED
        assert threads["read"] != threads["loop"]

    def test_missing_file_never_hits_server(self):
        def handler(request):
            raise AssertionError("request should not be sent")

        session = SchedulerSession(CONFIG)
        state = run(with_client(handler, lambda c: c.upload_into(session, None)))

        assert state.phase is UploadPhase.IDLE
        assert state.message == "Select a file first"


# =============================================================================
# STATE
# =============================================================================

class TestState:

    def test_get_state_with_data(self):
        def handler(request):
            assert (request.method, request.url.path) == ("GET", "/api/state")
            return httpx.Response(200, json={
                "hasData": True,
                "busySlots": {"Bob": [{"start": "11:00", "end": "11:30"}]},
                "participants": ["Alice", "Bob"],
            })

        snapshot = run(with_client(handler, lambda c: c.get_state()))

        assert snapshot.participants == ("Alice", "Bob")
        assert str(snapshot.busy_for("Bob")[0]) == "11:00-11:30"

    def test_get_state_without_data(self):
        def handler(request):
            return httpx.Response(200, json={"hasData": False, "busySlots": {}, "participants": []})

        assert run(with_client(handler, lambda c: c.get_state())) is None

    def test_clear_state(self):
        calls = []

        def handler(request):
            calls.append((request.method, request.url.path))
            return httpx.Response(204)

        run(with_client(handler, lambda c: c.clear_state()))

        assert calls == [("DELETE", "/api/state")]

    def test_network_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        with pytest.raises(TransportError):
            run(with_client(handler, lambda c: c.get_state()))


# =============================================================================
# SLOT SEARCH
# =============================================================================

class TestFindSlots:

    REQUEST = MeetingRequest(
        required=("Alice", "Bob"), optional=("Carol",), duration_minutes=30, buffer_minutes=10,
    )

    def test_request_body_and_results(self):
        bodies = []

        async def handler(request):
            bodies.append(json.loads(await request.aread()))
            return httpx.Response(200, json={"slots": [
                {"start": "09:00", "availableOptional": ["Carol"], "unavailableOptional": []},
                {"start": "14:00", "end": "14:45", "availableOptional": [], "unavailableOptional": ["Carol"]},
            ]})

        slots = run(with_client(handler, lambda c: c.find_slots(self.REQUEST)))

        assert bodies == [{
            "required": ["Alice", "Bob"],
            "optional": ["Carol"],
            "durationMinutes": 30,
            "bufferMinutes": 10,
            "blackouts": [],
        }]
        assert str(slots[0].interval) == "09:00-09:30"
        assert slots[0].available_optional == ("Carol",)
        assert str(slots[1].interval) == "14:00-14:45"
        assert slots[1].unavailable_optional == ("Carol",)

    def test_server_error(self):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(TransportError, match="Server error: 503"):
            run(with_client(handler, lambda c: c.find_slots(self.REQUEST)))

    def test_server_validation_error(self):
        def handler(request):
            return httpx.Response(400, json={"error": "Unknown participant: Zed"})

        with pytest.raises(ValidationError, match="Unknown participant"):
            run(with_client(handler, lambda c: c.find_slots(self.REQUEST)))

    def test_search_into_highlights_session(self):
        def handler(request):
            return httpx.Response(200, json={"slots": [{"start": "10:00"}]})

        session = SchedulerSession(CONFIG)
        session.adopt(AvailabilitySnapshot.from_payload({"busySlots": {}, "participants": ["A", "B"]}))
        session.toggle("A", ParticipantCategory.REQUIRED)
        session.toggle("B", ParticipantCategory.REQUIRED)

        slots = run(with_client(handler, lambda c: c.search_into(session, 60)))

        assert len(slots) == 1
        assert session.timeline_view().overlay_count == 2
        assert str(session.results[0].interval) == "10:00-11:00"
