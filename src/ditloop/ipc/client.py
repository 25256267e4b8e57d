"""IPC client - receives broadcasts in sibling processes"""

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

from ..config import IPC_READ_CHUNK
from ..telemetry import get_logger
from .messages import IpcMessage, LineDecoder

logger = get_logger(__name__)


class IpcClient:
    """Connects to an IpcServer socket and decodes its message stream.

    Partial reads are buffered; lines that fail to decode are skipped
    silently so one bad frame cannot break the stream.
    """

    def __init__(self, socket_path: str | Path):
        self.socket_path = str(socket_path)
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._decoder = LineDecoder()

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        """Open the connection.

        Raises:
            OSError: The socket does not exist or refuses connections
        """
        self._reader, self._writer = await asyncio.open_unix_connection(self.socket_path)
        logger.debug(f"[IPC] Connected to {self.socket_path}")

    def feed(self, data: bytes) -> list[IpcMessage]:
        """Decode a raw chunk read from the socket."""
        return self._decoder.feed(data)

    async def messages(self) -> AsyncIterator[IpcMessage]:
        """Yield messages until the server closes the connection."""
        if self._reader is None:
            raise RuntimeError("IpcClient not connected. Call connect() first.")
        while True:
            try:
                chunk = await self._reader.read(IPC_READ_CHUNK)
            except ConnectionError as e:
                logger.debug(f"[IPC] Connection lost: {e}")
                return
            if not chunk:
                return
            for message in self.feed(chunk):
                yield message

    async def send(self, message: IpcMessage) -> None:
        """Send a message to the server."""
        if not self.connected:
            raise RuntimeError("IpcClient not connected. Call connect() first.")
        self._writer.write(message.encode())
        await self._writer.drain()

    async def close(self) -> None:
        """Close the connection."""
        if self._writer is None:
            return
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except ConnectionError:
            pass
        self._writer = None
        self._reader = None
