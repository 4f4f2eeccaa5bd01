"""Round phase state machine and countdown arithmetic.

Phases only move forward in response to server events:
``AwaitingStart -> Active -> Revealed -> AwaitingStart``. Each round event
replaces the phase outright; nothing is merged with the previous phase.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Union

from .messages import GameFinished, InboundEvent, RoundFinished, RoundStarted
from .ws_constants import GUIDE_ACTIVE, GUIDE_AWAITING_START, GUIDE_REVEALED

_ZERO = timedelta(0)
_HALF_TENTH = timedelta(milliseconds=50)


@dataclass(frozen=True)
class AwaitingStart:
    pass


@dataclass(frozen=True)
class Active:
    word: str
    deadline: datetime


@dataclass(frozen=True)
class Revealed:
    answer: str
    deadline: datetime


RoundPhase = Union[AwaitingStart, Active, Revealed]


def advance(phase: RoundPhase, event: InboundEvent, now: datetime) -> tuple[RoundPhase, str | None]:
    """Apply one inbound event. Returns the next phase and a deadline error, if any.

    A deadline that failed to parse falls back to ``now`` so the countdown is
    already expired, but the transition still happens.
    """
    if isinstance(event, RoundStarted):
        deadline = event.finish_at if event.finish_at is not None else now
        return Active(word=event.word, deadline=deadline), event.error
    if isinstance(event, RoundFinished):
        deadline = event.next_round_at if event.next_round_at is not None else now
        return Revealed(answer=event.answer, deadline=deadline), event.error
    if isinstance(event, GameFinished):
        return AwaitingStart(), None
    return phase, None


def deadline_of(phase: RoundPhase) -> datetime | None:
    if isinstance(phase, (Active, Revealed)):
        return phase.deadline
    return None


def remaining(phase: RoundPhase, now: datetime) -> timedelta:
    """Time left until the phase deadline, never negative."""
    deadline = deadline_of(phase)
    if deadline is None:
        return _ZERO
    return max(_ZERO, deadline - now)


def guide_text(phase: RoundPhase) -> str:
    if isinstance(phase, Active):
        return GUIDE_ACTIVE
    if isinstance(phase, Revealed):
        return GUIDE_REVEALED
    return GUIDE_AWAITING_START


def display_word(phase: RoundPhase) -> str:
    if isinstance(phase, Active):
        return phase.word
    if isinstance(phase, Revealed):
        return phase.answer
    return ""


def format_countdown(left: timedelta) -> str:
    """Render as seconds with one decimal, rounded half-up to 100ms: ``"9.5s"``."""
    tenths = (max(left, _ZERO) // _HALF_TENTH + 1) // 2
    return f"{tenths // 10}.{tenths % 10}s"
