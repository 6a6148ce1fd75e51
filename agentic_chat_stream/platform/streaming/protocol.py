"""Client-facing streaming protocol.

Each outbound event is one Server-Sent Events line:
``data: <JSON object>\\n\\n``, where the object carries a ``type``
discriminator. A stream is ``connected`` first, then tokens and tool
lifecycle events, and ends with exactly one ``done`` or ``error``.
"""

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

SSE_DATA_PREFIX = "data: "
SSE_LINE_DELIMITER = "\n\n"


class Connected(BaseModel):
    type: Literal["connected"] = "connected"


class Token(BaseModel):
    type: Literal["token"] = "token"
    token: str


class ToolStart(BaseModel):
    type: Literal["tool_start"] = "tool_start"
    tool: str
    input: Any = None


class ToolEnd(BaseModel):
    type: Literal["tool_end"] = "tool_end"
    tool: str
    output: Any = None


class Done(BaseModel):
    type: Literal["done"] = "done"


class Error(BaseModel):
    type: Literal["error"] = "error"
    error: str


OutboundEvent = Annotated[
    Connected | Token | ToolStart | ToolEnd | Done | Error,
    Field(discriminator="type"),
]

_outbound_adapter: TypeAdapter = TypeAdapter(OutboundEvent)


def encode_event(event: BaseModel) -> str:
    """Serialize an outbound event as a single SSE data line."""
    payload = json.dumps(event.model_dump(), default=str)
    return f"{SSE_DATA_PREFIX}{payload}{SSE_LINE_DELIMITER}"


def decode_line(line: str) -> OutboundEvent:
    """Parse one SSE data line back into its outbound event.

    Raises:
        ValueError: If the line is not a data line
        pydantic.ValidationError: If the payload is not a known event
    """
    line = line.strip()
    if not line.startswith(SSE_DATA_PREFIX.strip()):
        raise ValueError(f"Not an SSE data line: {line[:40]!r}")
    return _outbound_adapter.validate_json(line[len(SSE_DATA_PREFIX.strip()) :].strip())
