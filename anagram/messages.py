"""Message decoder: turns one server frame into a typed ``InboundEvent``.

Every frame is a JSON object ``{"type": <tag>, "content": <payload>}``.
Content shapes are validated with pydantic so that a wrong field type
becomes a ``DecodeError`` instead of blowing up deeper in the client.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Union

from pydantic import AwareDatetime, BaseModel, StrictStr, StringConstraints, TypeAdapter, ValidationError

from .errors import DecodeError
from .ws_constants import (
    MSG_CHAT_MESSAGE,
    MSG_ONGOING_ROUND_INFO,
    MSG_FINISHED_ROUND_INFO,
    MSG_FINISHED_GAME,
    MSG_PONG_MESSAGE,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Inbound events
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Chat:
    text: str


@dataclass(frozen=True)
class RoundStarted:
    word: str
    finish_at: datetime | None
    error: str | None = None  # set when round_finish_time did not parse


@dataclass(frozen=True)
class RoundFinished:
    answer: str
    next_round_at: datetime | None
    error: str | None = None  # set when to_next_round_time did not parse


@dataclass(frozen=True)
class GameFinished:
    pass


@dataclass(frozen=True)
class Pong:
    pass


@dataclass(frozen=True)
class Unrecognized:
    tag: str

    @property
    def message(self) -> str:
        return f"unknown message type: {self.tag}"


InboundEvent = Union[Chat, RoundStarted, RoundFinished, GameFinished, Pong, Unrecognized]


# ------------------------------------------------------------------
# Content schemas
# ------------------------------------------------------------------

class OngoingRoundContent(BaseModel):
    word_to_guess: StrictStr
    round_finish_time: StrictStr


class FinishedRoundContent(BaseModel):
    word_answer: StrictStr
    to_next_round_time: StrictStr


_CHAT_CONTENT = TypeAdapter(StrictStr)
# pydantic alone also takes unix seconds, a space separator, "+0000" offsets
# and HH:MM times; the wire format is strictly RFC 3339.
RFC3339_PATTERN = r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
_RFC3339_TEXT = TypeAdapter(Annotated[str, StringConstraints(pattern=RFC3339_PATTERN)])
_DEADLINE = TypeAdapter(AwareDatetime)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def parse_deadline(field: str, value: str) -> tuple[datetime | None, str | None]:
    """Parse an RFC-3339 timestamp. Returns ``(instant, None)`` or ``(None, error)``."""
    try:
        return _DEADLINE.validate_python(_RFC3339_TEXT.validate_python(value)), None
    except ValidationError as exc:
        return None, f'parsing {field} "{value}": {_describe(exc)}'


def _validate(model: type[BaseModel], tag: str, content: Any) -> Any:
    try:
        return model.model_validate(content)
    except ValidationError as exc:
        raise DecodeError(f"invalid {tag} content: {_describe(exc)}") from exc


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------

def decode_frame(raw: str | bytes) -> InboundEvent:
    """Decode one frame. Raises ``DecodeError`` on malformed input.

    Unknown tags are not errors: they decode to ``Unrecognized`` and the
    caller decides how to report them.
    """
    try:
        frame = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"invalid frame JSON: {exc}") from exc

    if not isinstance(frame, dict):
        raise DecodeError("frame must be a JSON object")
    # A frame without a tag is reported like any other unknown type.
    tag = frame.get("type", "")
    content = frame.get("content")
    logger.debug("Decoding frame type=%s", tag)

    if tag == MSG_CHAT_MESSAGE:
        try:
            return Chat(_CHAT_CONTENT.validate_python(content))
        except ValidationError as exc:
            raise DecodeError(f"invalid {tag} content: {_describe(exc)}") from exc

    if tag == MSG_ONGOING_ROUND_INFO:
        info = _validate(OngoingRoundContent, tag, content)
        finish_at, error = parse_deadline("round_finish_time", info.round_finish_time)
        return RoundStarted(word=info.word_to_guess, finish_at=finish_at, error=error)

    if tag == MSG_FINISHED_ROUND_INFO:
        info = _validate(FinishedRoundContent, tag, content)
        next_round_at, error = parse_deadline("to_next_round_time", info.to_next_round_time)
        return RoundFinished(answer=info.word_answer, next_round_at=next_round_at, error=error)

    if tag == MSG_FINISHED_GAME:
        return GameFinished()

    if tag == MSG_PONG_MESSAGE:
        return Pong()

    return Unrecognized(tag if isinstance(tag, str) else json.dumps(tag))
