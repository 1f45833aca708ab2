"""
Stream Frame Decoder

Turns arbitrarily chunked bytes from the upload response into typed
event frames.

WIRE FORMAT:
============
    event: progress
    data: {"message": "50%"}
    <blank line>

A block ends at a blank line ("\\n\\n"). Inside a block, lines start
with ``event: `` or ``data: ``; when a prefix repeats, the last line
wins. Other lines are ignored.

GUARANTEES:
===========
1. Chunk boundaries never change the frames produced, including splits
   inside the delimiter or inside a multi-byte character.
2. Frames come out in arrival order.
3. A trailing block never followed by a delimiter is dropped on close.
"""

from __future__ import annotations
from enum import Enum
from typing import Iterable, List
import codecs
import logging

from ..contracts import EventFrame


logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"
EVENT_PREFIX = "event: "
DATA_PREFIX = "data: "


class TokenizerState(Enum):
    """Where the decoder stands relative to the next delimiter."""
    AWAITING_LINE = "awaiting_line"    # Buffer empty, next byte starts a block
    AWAITING_BLANK = "awaiting_blank"  # Partial block pending until a blank line


def parse_block(block: str) -> EventFrame:
    """Parse one complete block into a frame (last prefixed line wins)."""
    event_type = ""
    data = ""
    for line in block.split("\n"):
        if line.startswith(EVENT_PREFIX):
            event_type = line[len(EVENT_PREFIX):]
        elif line.startswith(DATA_PREFIX):
            data = line[len(DATA_PREFIX):]
    return EventFrame(type=event_type, data=data)


class StreamFrameDecoder:
    """
    Incremental event frame decoder.

    Call ``feed`` for every chunk as it arrives, then ``close`` once the
    stream ends. The pending buffer is unbounded.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._closed = False
        self._frames_emitted = 0

    @property
    def state(self) -> TokenizerState:
        if self._buffer:
            return TokenizerState.AWAITING_BLANK
        return TokenizerState.AWAITING_LINE

    @property
    def pending(self) -> str:
        """Text received since the last delimiter."""
        return self._buffer

    @property
    def frames_emitted(self) -> int:
        return self._frames_emitted

    def feed(self, chunk: bytes) -> List[EventFrame]:
        """Decode a chunk and return every frame it completes."""
        if self._closed:
            raise RuntimeError("Decoder already closed")

        self._buffer += self._decoder.decode(chunk)
        blocks = self._buffer.split(FRAME_DELIMITER)
        self._buffer = blocks.pop()

        frames = [parse_block(block) for block in blocks]
        self._frames_emitted += len(frames)
        return frames

    def close(self) -> List[EventFrame]:
        """
        Signal end of stream.

        Any remainder without a trailing delimiter is discarded, never
        turned into a frame. Always returns an empty list.
        """
        if self._closed:
            return []
        self._closed = True

        remainder = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        if remainder:
            logger.debug("Discarding %d characters of incomplete frame at end of stream", len(remainder))
        return []


def decode_all(chunks: Iterable[bytes]) -> List[EventFrame]:
    """Feed every chunk through a fresh decoder and close it."""
    decoder = StreamFrameDecoder()
    frames: List[EventFrame] = []
    for chunk in chunks:
        frames.extend(decoder.feed(chunk))
    decoder.close()
    return frames
