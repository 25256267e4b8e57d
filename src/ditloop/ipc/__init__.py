"""IPC module - local broadcast channel between DitLoop processes"""

from .client import IpcClient
from .messages import (
    GIT_UPDATED,
    IDENTITY_CHANGED,
    LAYOUT_CHANGED,
    WORKSPACE_CHANGED,
    IpcMessage,
    LineDecoder,
    decode_line,
)
from .server import IpcServer

__all__ = [
    "IpcServer",
    "IpcClient",
    "IpcMessage",
    "LineDecoder",
    "decode_line",
    "WORKSPACE_CHANGED",
    "IDENTITY_CHANGED",
    "GIT_UPDATED",
    "LAYOUT_CHANGED",
]
