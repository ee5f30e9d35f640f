"""Event-stream decoding for Android binary XML.

Key Components:
    TokenDecoder: State machine building an element tree from framed events
    DecoderState: Lifecycle states of a decode session
"""

from .decoder import DecoderState, TokenDecoder

__all__ = [
    "DecoderState",
    "TokenDecoder",
]
