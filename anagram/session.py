"""Session state and the orchestrator's pure transition function.

``reduce(session, event, now)`` is the only place session state changes.
It returns the next ``Session`` plus a list of effects for the runtime to
carry out (read the next frame, send text, re-arm the countdown ticker...).
Nothing in this module touches the network or the clock, so any runtime can
pump it -- ``client.GameClient`` is the asyncio one.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Union

from .chat_log import ChatLog
from .commands import ClearChat, OutboundPayload, Quit, Rejected, submit
from .config import SessionConfig
from .messages import (
    Chat,
    GameFinished,
    InboundEvent,
    Pong,
    RoundFinished,
    RoundStarted,
    Unrecognized,
)
from .round_state import AwaitingStart, RoundPhase, advance, remaining

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    config: SessionConfig = field(default_factory=SessionConfig)
    connected: bool = False
    connection_lost: bool = False
    error: str | None = None
    chat: ChatLog = field(default_factory=ChatLog)
    phase: RoundPhase = field(default_factory=AwaitingStart)
    input_value: str = ""
    ticker: int = 0  # generation of the live countdown ticker

    @classmethod
    def new(cls, config: SessionConfig | None = None) -> "Session":
        config = config or SessionConfig()
        return cls(config=config, chat=ChatLog(capacity=config.chat_capacity))


# ------------------------------------------------------------------
# Events fed into the orchestrator
# ------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectSucceeded:
    pass


@dataclass(frozen=True)
class ConnectFailed:
    error: str


@dataclass(frozen=True)
class FrameReceived:
    event: InboundEvent


@dataclass(frozen=True)
class DecodeFailed:
    error: str


@dataclass(frozen=True)
class ReadFailed:
    error: str
    closed: bool = False


@dataclass(frozen=True)
class Tick:
    generation: int


@dataclass(frozen=True)
class KeyPressed:
    key: str  # "enter", "backspace", "ctrl+c", "ctrl+e" or one printable character


@dataclass(frozen=True)
class LineSubmitted:
    line: str


@dataclass(frozen=True)
class SendSucceeded:
    text: str


@dataclass(frozen=True)
class SendFailed:
    error: str


@dataclass(frozen=True)
class KeepaliveFailed:
    error: str


Event = Union[
    ConnectSucceeded, ConnectFailed, FrameReceived, DecodeFailed, ReadFailed, Tick,
    KeyPressed, LineSubmitted, SendSucceeded, SendFailed, KeepaliveFailed,
]


# ------------------------------------------------------------------
# Effects requested from the runtime
# ------------------------------------------------------------------

@dataclass(frozen=True)
class ReadNext:
    pass


@dataclass(frozen=True)
class StartKeepalive:
    pass


@dataclass(frozen=True)
class StopKeepalive:
    pass


@dataclass(frozen=True)
class Send:
    text: str


@dataclass(frozen=True)
class ScheduleTick:
    generation: int
    delay: float


@dataclass(frozen=True)
class Exit:
    pass


Effect = Union[ReadNext, StartKeepalive, StopKeepalive, Send, ScheduleTick, Exit]
Step = tuple[Session, list[Effect]]


# ------------------------------------------------------------------
# Handlers
# ------------------------------------------------------------------

def _on_connect_succeeded(session: Session, event: ConnectSucceeded, now: datetime) -> Step:
    session = replace(session, connected=True, connection_lost=False)
    return session, [ReadNext(), StartKeepalive()]


def _on_connect_failed(session: Session, event: ConnectFailed, now: datetime) -> Step:
    # No retry: the session is display/quit only from here on.
    return replace(session, connected=False, connection_lost=True, error=event.error), []


def _on_frame(session: Session, event: FrameReceived, now: datetime) -> Step:
    inbound = event.event
    effects: list[Effect] = [ReadNext()]

    if isinstance(inbound, Chat):
        session = replace(session, chat=session.chat.append(inbound.text))
    elif isinstance(inbound, (RoundStarted, RoundFinished, GameFinished)):
        phase, error = advance(session.phase, inbound, now)
        generation = session.ticker + 1
        session = replace(
            session,
            phase=phase,
            ticker=generation,
            error=error if error is not None else session.error,
        )
        if not isinstance(inbound, GameFinished):
            effects.append(ScheduleTick(generation, session.config.tick_interval))
    elif isinstance(inbound, Unrecognized):
        logger.warning("Unrecognized message type from server: %s", inbound.tag)
        session = replace(session, error=inbound.message)
    elif not isinstance(inbound, Pong):
        logger.warning("Ignoring unexpected inbound event %r", inbound)
    return session, effects


def _on_decode_failed(session: Session, event: DecodeFailed, now: datetime) -> Step:
    return replace(session, error=event.error), [ReadNext()]


def _on_read_failed(session: Session, event: ReadFailed, now: datetime) -> Step:
    if event.closed:
        # Nothing more will ever arrive: stop reading and pinging, keep the UI.
        session = replace(session, error=event.error, connected=False, connection_lost=True)
        return session, [StopKeepalive()]
    return replace(session, error=event.error), [ReadNext()]


def _on_tick(session: Session, event: Tick, now: datetime) -> Step:
    if event.generation != session.ticker:
        return session, []
    if remaining(session.phase, now).total_seconds() > 0:
        return session, [ScheduleTick(event.generation, session.config.tick_interval)]
    return session, []


def _on_line_submitted(session: Session, event: LineSubmitted, now: datetime) -> Step:
    result = submit(event.line, session.connected)
    if isinstance(result, Quit):
        return session, [Exit()]
    if isinstance(result, ClearChat):
        return replace(session, chat=session.chat.cleared(), input_value=""), []
    if isinstance(result, Rejected):
        return replace(session, error=result.message), []
    if isinstance(result, OutboundPayload):
        return session, [Send(result.text)]
    return session, []


def _on_key(session: Session, event: KeyPressed, now: datetime) -> Step:
    key = event.key
    if key == "ctrl+c":
        return session, [Exit()]
    if key == "ctrl+e":
        return replace(session, error=None), []
    if key == "enter":
        return _on_line_submitted(session, LineSubmitted(session.input_value), now)
    if key == "backspace":
        return replace(session, input_value=session.input_value[:-1]), []
    if len(key) == 1 and key.isprintable():
        return replace(session, input_value=session.input_value + key), []
    return session, []


def _on_send_succeeded(session: Session, event: SendSucceeded, now: datetime) -> Step:
    # Keys typed while the write was in flight stay in the buffer.
    if session.input_value.strip() != event.text:
        return session, []
    return replace(session, input_value=""), []


def _on_error(session: Session, event: Union[SendFailed, KeepaliveFailed], now: datetime) -> Step:
    return replace(session, error=event.error), []


# Dispatch table: event type -> handler
_HANDLERS: dict[type, Callable[[Session, Event, datetime], Step]] = {
    ConnectSucceeded: _on_connect_succeeded,
    ConnectFailed: _on_connect_failed,
    FrameReceived: _on_frame,
    DecodeFailed: _on_decode_failed,
    ReadFailed: _on_read_failed,
    Tick: _on_tick,
    KeyPressed: _on_key,
    LineSubmitted: _on_line_submitted,
    SendSucceeded: _on_send_succeeded,
    SendFailed: _on_error,
    KeepaliveFailed: _on_error,
}


def reduce(session: Session, event: Event, now: datetime) -> Step:
    """Apply one event to the session. ``now`` must be timezone-aware."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown session event: {event!r}")
    return handler(session, event, now)
