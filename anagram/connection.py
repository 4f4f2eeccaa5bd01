"""Connection manager: owns the WebSocket to the game server.

One reader and any number of writers may use a ``GameConnection``
concurrently. Writes are serialized behind a write-only lock so the
keepalive ping and user messages never interleave; reads are never blocked
by it.
"""

import asyncio
import logging

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from .errors import ConnectError, ReadError, WriteError
from .messages import InboundEvent, decode_frame

logger = logging.getLogger(__name__)


class GameConnection:

    def __init__(self, ws: ClientConnection, url: str):
        self.ws = ws
        self.url = url
        self._send_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def open(cls, url: str) -> "GameConnection":
        """Dial once. Raises ``ConnectError``; there is no retry."""
        logger.info("Connecting to %s", url)
        try:
            ws = await connect(url)
        except (OSError, WebSocketException) as exc:
            logger.warning("Connect to %s failed: %s", url, exc)
            raise ConnectError(f"connect {url}: {exc}") from exc
        logger.info("Connected to %s", url)
        return cls(ws, url)

    async def read_frame(self) -> str:
        """Block until one complete frame arrives and return its text."""
        try:
            data = await self.ws.recv()
        except ConnectionClosed as exc:
            raise ReadError(f"read: {exc}", closed=True) from exc
        except (OSError, WebSocketException, RuntimeError) as exc:
            raise ReadError(f"read: {exc}") from exc
        if isinstance(data, bytes):
            return data.decode("utf-8", errors="replace")
        return data

    async def read_event(self) -> InboundEvent:
        """Read and decode one frame. Raises ``ReadError`` or ``DecodeError``."""
        return decode_frame(await self.read_frame())

    async def send_text(self, text: str) -> None:
        async with self._send_lock:
            try:
                await self.ws.send(text)
            except (OSError, WebSocketException, RuntimeError) as exc:
                raise WriteError(f"write: {exc}") from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self.ws.close()
        except (OSError, WebSocketException):
            logger.exception("Error closing connection to %s", self.url)
