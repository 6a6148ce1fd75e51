"""Streaming infrastructure: wire protocol, bounded sink and event translator."""

from agentic_chat_stream.platform.streaming.protocol import (
    Connected,
    Done,
    Error,
    OutboundEvent,
    Token,
    ToolEnd,
    ToolStart,
    decode_line,
    encode_event,
)
from agentic_chat_stream.platform.streaming.sink import EventSink
from agentic_chat_stream.platform.streaming.translator import EventStreamTranslator, translate

__all__ = [
    "Connected",
    "Done",
    "Error",
    "EventSink",
    "EventStreamTranslator",
    "OutboundEvent",
    "Token",
    "ToolEnd",
    "ToolStart",
    "decode_line",
    "encode_event",
    "translate",
]
