"""
Server-sent event schemas for the project status stream.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel


class StreamEventType(str, Enum):
    """Server-to-client event types."""

    PROJECT_UPDATE = "project-update"
    ERROR = "error"


class StreamEvent(BaseModel):
    """
    Base streaming event model.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: StreamEventType
    data: dict[str, Any]

    def to_sse(self) -> str:
        """Encode as one server-sent event frame."""
        return f"event: {self.event.value}\ndata: {json.dumps(self.data, default=str)}\n\n"


HEARTBEAT_FRAME = ": heartbeat\n\n"
