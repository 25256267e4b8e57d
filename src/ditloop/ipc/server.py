"""IPC server - Unix domain socket broadcast channel

Responsibilities:
- bind the socket (removing a stale file first)
- fan out each broadcast to every open connection independently
- replay the latest message of each type to late-connecting clients
- hand lines sent by clients to an optional handler
"""

import asyncio
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from ..config import IPC_MAX_WRITE_BUFFER, IPC_READ_CHUNK
from ..telemetry import get_logger, metrics
from .messages import IpcMessage, LineDecoder

logger = get_logger(__name__)

# Handler for messages sent by clients: (message) -> None | awaitable
ClientMessageHandler = Callable[[IpcMessage], Awaitable[None] | None]


class IpcServer:
    """Newline-delimited JSON broadcast server over a Unix socket.

    Delivery is best effort per connection: a closed peer, or one whose
    unsent buffer grows past max_write_buffer, is dropped without affecting
    the others.
    """

    def __init__(self, socket_path: str | Path, max_write_buffer: int = IPC_MAX_WRITE_BUFFER):
        self.socket_path = str(socket_path)
        self._max_write_buffer = max_write_buffer
        self._server: asyncio.AbstractServer | None = None
        self._clients: set[asyncio.StreamWriter] = set()
        self._last_frames: dict[str, bytes] = {}
        self._handler: ClientMessageHandler | None = None

    @property
    def client_count(self) -> int:
        return len(self._clients)

    @property
    def is_serving(self) -> bool:
        return self._server is not None

    def set_message_handler(self, handler: ClientMessageHandler | None) -> None:
        """Set the callback for messages clients send to the server."""
        self._handler = handler

    async def start(self) -> None:
        """Start listening; removes a stale socket file from a previous crash."""
        self._unlink()
        self._server = await asyncio.start_unix_server(self._handle_client, path=self.socket_path)
        logger.info(f"[IPC] Listening on {self.socket_path}")

    def broadcast(self, message: IpcMessage) -> int:
        """Send a message to every connected client.

        The message is serialised once; each write is independent.

        Returns:
            Number of clients the frame was queued for
        """
        frame = message.encode()
        self._last_frames[message.type] = frame

        delivered = 0
        for writer in list(self._clients):
            if self._write(writer, frame):
                delivered += 1
        logger.debug(f"[IPC] broadcast {message.type} -> {delivered} clients")
        return delivered

    async def stop(self) -> None:
        """Close every connection and the listener, then unlink the socket."""
        for writer in list(self._clients):
            writer.close()
        self._clients.clear()

        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

        self._unlink()
        logger.info(f"[IPC] Stopped {self.socket_path}")

    def _write(self, writer: asyncio.StreamWriter, frame: bytes) -> bool:
        if writer.is_closing():
            self._drop(writer, "closed")
            return False
        if writer.transport.get_write_buffer_size() > self._max_write_buffer:
            self._drop(writer, "backlog")
            return False
        try:
            writer.write(frame)
            return True
        except (ConnectionError, RuntimeError) as e:
            self._drop(writer, str(e))
            return False

    def _drop(self, writer: asyncio.StreamWriter, reason: str) -> None:
        self._clients.discard(writer)
        writer.close()
        metrics.inc("ipc.dropped", {"reason": reason})
        logger.warning(f"[IPC] Dropped client ({reason})")

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._clients.add(writer)
        logger.debug(f"[IPC] Client connected ({len(self._clients)} total)")

        for frame in self._last_frames.values():
            if not self._write(writer, frame):
                return

        decoder = LineDecoder()
        try:
            while True:
                chunk = await reader.read(IPC_READ_CHUNK)
                if not chunk:
                    break
                for message in decoder.feed(chunk):
                    await self._dispatch(message)
        except ConnectionError as e:
            logger.debug(f"[IPC] Client connection error: {e}")
        finally:
            self._clients.discard(writer)
            writer.close()
            logger.debug(f"[IPC] Client disconnected ({len(self._clients)} left)")

    async def _dispatch(self, message: IpcMessage) -> None:
        if self._handler is None:
            return
        try:
            result: Any = self._handler(message)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"[IPC] Client message handler failed for {message.type}: {e}")

    def _unlink(self) -> None:
        try:
            os.unlink(self.socket_path)
        except FileNotFoundError:
            pass
