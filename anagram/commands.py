"""Input command processor: decides what a submitted input line means.

Local commands (``/exit``, ``/clear``) never reach the server, ``/ping`` is
refused because keepalive is automatic, and anything else is sent verbatim
once a connection exists.
"""

from dataclasses import dataclass
from typing import Union

from .ws_constants import CMD_CLEAR, CMD_EXIT, CMD_PING

PING_REJECTED_MESSAGE = "don't ping manually! this is handled automatically by the client"


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class ClearChat:
    pass


@dataclass(frozen=True)
class Rejected:
    message: str


@dataclass(frozen=True)
class OutboundPayload:
    text: str


@dataclass(frozen=True)
class NoOp:
    pass


SubmitResult = Union[Quit, ClearChat, Rejected, OutboundPayload, NoOp]


def submit(raw_line: str, connected: bool) -> SubmitResult:
    line = raw_line.strip()
    if line == CMD_EXIT:
        return Quit()
    if line == CMD_CLEAR:
        return ClearChat()
    if line == CMD_PING:
        return Rejected(PING_REJECTED_MESSAGE)
    if not line:
        return NoOp()
    if not connected:
        # Still connecting (or gave up): keep the text in the input box.
        return NoOp()
    return OutboundPayload(line)
