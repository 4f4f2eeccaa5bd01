"""asyncio runtime for one game session.

``GameClient`` is the single writer of session state. Three producers feed
its queue -- the frame reader, the keepalive loop and user input -- and the
main loop applies each event with ``session.reduce()``, hands the result to
the renderer, then carries out the returned effects.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from .config import PING_INTERVAL, SessionConfig
from .connection import GameConnection
from .errors import ConnectError, DecodeError, ReadError, WriteError
from .keepalive import keepalive_loop
from .session import (
    ConnectFailed,
    ConnectSucceeded,
    DecodeFailed,
    Effect,
    Event,
    Exit,
    FrameReceived,
    KeepaliveFailed,
    ReadFailed,
    ReadNext,
    ScheduleTick,
    Send,
    SendFailed,
    SendSucceeded,
    Session,
    StartKeepalive,
    StopKeepalive,
    Tick,
    reduce,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _task_done_callback(task: asyncio.Task):
    """Log exceptions from background tasks instead of silently swallowing."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task failed: %s", exc, exc_info=exc)


class GameClient:
    """Holds the session, the connection and every producer task for one run."""

    def __init__(
        self,
        url: str,
        *,
        render: Callable[[Session], None] | None = None,
        config: SessionConfig | None = None,
        ping_interval: float = PING_INTERVAL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.url = url
        self.session = Session.new(config)
        self.conn: GameConnection | None = None
        self.ping_interval = ping_interval
        self._render = render or (lambda session: None)
        self._clock = clock
        self._events: asyncio.Queue = asyncio.Queue()
        self._tasks: set[asyncio.Task] = set()
        self._read_task: asyncio.Task | None = None
        self._keepalive_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Event intake
    # ------------------------------------------------------------------

    def post(self, event: Event) -> None:
        """Queue an event. Must be called on the client's event loop."""
        self._events.put_nowait(event)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Connect, then process events until an ``Exit`` effect."""
        self._render(self.session)
        self._spawn(self._connect())
        try:
            while True:
                event = await self._events.get()
                if self.dispatch(event):
                    logger.info("Quit requested, shutting down")
                    break
        finally:
            await self.shutdown()

    def dispatch(self, event: Event) -> bool:
        """Apply one event and run its effects. Returns True once the session should end."""
        self.session, effects = reduce(self.session, event, self._clock())
        self._render(self.session)
        done = False
        for effect in effects:
            if isinstance(effect, Exit):
                done = True
            else:
                self._apply(effect)
        return done

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, ReadNext):
            if self.conn is None:
                logger.warning("ReadNext without a connection, ignoring")
            elif self._read_task is not None and not self._read_task.done():
                logger.warning("ReadNext while a read is outstanding, ignoring")
            else:
                self._read_task = self._spawn(self._read_once())
        elif isinstance(effect, StartKeepalive):
            if self.conn is not None and self._keepalive_task is None:
                self._keepalive_task = self._spawn(
                    keepalive_loop(
                        self.conn,
                        lambda exc: self.post(KeepaliveFailed(str(exc))),
                        interval=self.ping_interval,
                    )
                )
        elif isinstance(effect, StopKeepalive):
            if self._keepalive_task is not None:
                self._keepalive_task.cancel()
                self._keepalive_task = None
        elif isinstance(effect, Send):
            self._spawn(self._send(effect.text))
        elif isinstance(effect, ScheduleTick):
            self._spawn(self._tick_after(effect.generation, effect.delay))
        else:
            logger.warning("Unknown effect %r", effect)

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(_task_done_callback)
        return task

    async def _connect(self) -> None:
        try:
            self.conn = await GameConnection.open(self.url)
        except ConnectError as exc:
            self.post(ConnectFailed(str(exc)))
        else:
            self.post(ConnectSucceeded())

    async def _read_once(self) -> None:
        try:
            inbound = await self.conn.read_event()
        except DecodeError as exc:
            logger.warning("Malformed frame: %s", exc)
            self.post(DecodeFailed(str(exc)))
        except ReadError as exc:
            logger.warning("Read failed (closed=%s): %s", exc.closed, exc)
            self.post(ReadFailed(str(exc), closed=exc.closed))
        else:
            self.post(FrameReceived(inbound))

    async def _send(self, text: str) -> None:
        if self.conn is None:
            self.post(SendFailed("write: not connected"))
            return
        try:
            await self.conn.send_text(text)
        except WriteError as exc:
            logger.warning("Send failed: %s", exc)
            self.post(SendFailed(str(exc)))
        else:
            self.post(SendSucceeded(text))

    async def _tick_after(self, generation: int, delay: float) -> None:
        await asyncio.sleep(delay)
        self.post(Tick(generation))

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def shutdown(self) -> None:
        """Cancel every producer and release the connection. In-flight frames are dropped."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._read_task = None
        self._keepalive_task = None
        if self.conn is not None:
            await self.conn.close()
