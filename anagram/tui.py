"""Terminal front end: rich rendering of a ``Session`` plus a raw-mode key reader.

The renderer only reads session state; keystrokes go back to the client as
``KeyPressed`` events so every state change still flows through ``reduce()``.
"""

import asyncio
import codecs
import logging
import os
import select
import sys
import termios
import threading
import tty
from datetime import datetime, timezone
from typing import Callable

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .client import GameClient
from .config import APP_WIDTH, DEFAULT_THEME, Theme
from .round_state import display_word, format_countdown, guide_text, remaining
from .session import KeyPressed, Session
from .ws_constants import (
    PLACEHOLDER_CONNECTED,
    PLACEHOLDER_CONNECTING,
    PLACEHOLDER_DISCONNECTED,
)

logger = logging.getLogger(__name__)

_CONTROL_KEYS = {
    "\x03": "ctrl+c",
    "\x05": "ctrl+e",
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
}


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------

def _banner(text: str, style: str, width: int) -> Text:
    return Text(text.center(width), style=style, no_wrap=True, overflow="ellipsis")


def header_text(session: Session, now: datetime) -> str:
    guide = guide_text(session.phase)
    left = remaining(session.phase, now)
    if left.total_seconds() <= 0:
        return guide
    return f"{guide} - {format_countdown(left)}"


def placeholder_text(session: Session) -> str:
    if session.connection_lost:
        return PLACEHOLDER_DISCONNECTED
    if session.connected:
        return PLACEHOLDER_CONNECTED
    return PLACEHOLDER_CONNECTING


def _chat_box(session: Session, theme: Theme, width: int) -> Panel:
    rows = session.chat.capacity
    lines: list[str] = []
    for message in session.chat:
        lines.extend(message.splitlines() or [""])
    lines = lines[-rows:]
    # Bottom-align: newest message sits on the last row.
    lines = [""] * (rows - len(lines)) + lines
    body = Text("\n".join(lines), no_wrap=True, overflow="ellipsis")
    return Panel(
        body,
        box=box.ROUNDED,
        width=width,
        height=rows + 2,
        padding=(0, 1),
        border_style=theme.chat_border,
    )


def _input_line(session: Session, theme: Theme) -> Text:
    line = Text("> ", style=theme.prompt)
    if session.input_value:
        line.append(session.input_value)
    else:
        line.append(placeholder_text(session), style=theme.placeholder)
    return line


def render_view(
    session: Session,
    now: datetime,
    theme: Theme = DEFAULT_THEME,
    width: int = APP_WIDTH,
) -> Group:
    rows = [
        Text(""),
        _banner("", theme.header, width),
        _banner(header_text(session, now), theme.header, width),
        _banner(f"'{display_word(session.phase)}'", theme.word, width),
        _banner("", theme.header, width),
        _chat_box(session, theme, width),
        _input_line(session, theme),
    ]
    if session.error:
        rows.append(Text(session.error, style=theme.error))
    rows.append(Text(""))
    rows.append(Text.assemble(
        ("Ctrl+C", theme.hotkey),
        (" exit  ", theme.hotkey_tooltip),
        ("Ctrl+E", theme.hotkey),
        (" clear errors", theme.hotkey_tooltip),
    ))
    return Group(*rows)


# ------------------------------------------------------------------
# Keyboard
# ------------------------------------------------------------------

def parse_keys(data: str) -> list[str]:
    """Translate raw terminal input into key names understood by ``reduce()``.

    Escape sequences (arrows, function keys) are dropped.
    """
    keys = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            i += 1
            if i < len(data) and data[i] in "[O":
                i += 1
                while i < len(data) and not ("@" <= data[i] <= "~"):
                    i += 1
                i += 1
            continue
        if ch == "\r" and data[i + 1:i + 2] == "\n":
            i += 1
        if ch in _CONTROL_KEYS:
            keys.append(_CONTROL_KEYS[ch])
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys


class KeyReader:
    """Reads stdin in raw mode on a background thread and reports key names."""

    def __init__(self, on_key: Callable[[str], None], stream=None):
        self.on_key = on_key
        self.stream = stream or sys.stdin
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._saved_attrs = None

    def start(self) -> None:
        fd = self.stream.fileno()
        try:
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setraw(fd)
            # Keep output post-processing so "\n" still returns the carriage.
            attrs = termios.tcgetattr(fd)
            attrs[1] |= termios.OPOST | termios.ONLCR
            termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        except termios.error as exc:
            raise RuntimeError(f"cannot switch terminal to raw mode: {exc}") from exc
        self._thread = threading.Thread(target=self._run, name="key-reader", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        fd = self.stream.fileno()
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while not self._stop.is_set():
            ready, _, _ = select.select([fd], [], [], 0.1)
            if not ready:
                continue
            data = os.read(fd, 1024)
            if not data:
                break
            for key in parse_keys(decoder.decode(data)):
                self.on_key(key)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1)
            self._thread = None
        if self._saved_attrs is not None:
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None


# ------------------------------------------------------------------
# Wiring
# ------------------------------------------------------------------

async def _run_session(url: str, console: Console, theme: Theme) -> None:
    loop = asyncio.get_running_loop()
    live = Live(console=console, screen=True, auto_refresh=False)

    def render(session: Session) -> None:
        live.update(render_view(session, datetime.now(timezone.utc), theme), refresh=True)

    client = GameClient(url, render=render)
    reader = KeyReader(lambda key: loop.call_soon_threadsafe(client.post, KeyPressed(key)))

    with live:
        reader.start()
        try:
            await client.run()
        finally:
            reader.stop()


def run_tui(url: str, *, theme: Theme = DEFAULT_THEME) -> int:
    """Run the full-screen client until the user quits. Returns the exit code."""
    if not sys.stdin.isatty():
        raise RuntimeError("stdin is not a terminal")
    asyncio.run(_run_session(url, Console(), theme))
    logger.info("Client exited cleanly")
    return 0
