"""
Upload Stream Layer

Responsibility:
Raw response bytes -> ordered EventFrames.
No lifecycle decisions are made here.
"""

from .decoder import (
    StreamFrameDecoder, TokenizerState, parse_block, decode_all,
    FRAME_DELIMITER, EVENT_PREFIX, DATA_PREFIX
)

__all__ = [
    'StreamFrameDecoder', 'TokenizerState', 'parse_block', 'decode_all',
    'FRAME_DELIMITER', 'EVENT_PREFIX', 'DATA_PREFIX'
]
