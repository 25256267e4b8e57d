"""IPC message model and line framing

Wire format: one compact UTF-8 JSON object per LF-terminated line,
{"type": str, "payload": any}.
"""

import json
from typing import Any

from pydantic import BaseModel, ValidationError

from ..telemetry import get_logger, metrics

logger = get_logger(__name__)

# Well-known message types
WORKSPACE_CHANGED = "workspace-changed"
IDENTITY_CHANGED = "identity-changed"
GIT_UPDATED = "git-updated"
LAYOUT_CHANGED = "layout-changed"


class IpcMessage(BaseModel):
    """A single broadcast message."""

    type: str
    payload: Any = None

    def encode(self) -> bytes:
        """Serialise to one newline-terminated frame."""
        return self.model_dump_json().encode("utf-8") + b"\n"


def decode_line(line: bytes) -> IpcMessage | None:
    """Decode one frame (without its newline).

    Returns:
        The message, or None when the line is blank or malformed
    """
    line = line.strip()
    if not line:
        return None
    try:
        return IpcMessage.model_validate(json.loads(line.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        logger.debug(f"[IPC] Discarding malformed line: {e}")
        metrics.inc("ipc.malformed")
        return None


class LineDecoder:
    """Accumulates partial reads and yields complete messages."""

    def __init__(self):
        self._buffer = b""

    def feed(self, data: bytes) -> list[IpcMessage]:
        """Add a chunk and decode every complete line in the buffer."""
        self._buffer += data
        *lines, self._buffer = self._buffer.split(b"\n")
        messages = []
        for line in lines:
            message = decode_line(line)
            if message is not None:
                messages.append(message)
        return messages

    @property
    def pending(self) -> bytes:
        """Bytes of the incomplete trailing line."""
        return self._buffer
