"""Client configuration: endpoint, layout sizes, timing, styles and logging."""

import logging
import os
from dataclasses import dataclass

# --- Endpoint ---

DEFAULT_URL = "wss://mc.chenk.my.id:3000/ws/anagram/1"

# --- Layout ---

APP_WIDTH = 56
CHAT_MESSAGES_MAX = 12

# --- Timing (seconds) ---

PING_INTERVAL = 10.0
TICK_INTERVAL = 0.1  # countdown resolution

# --- Logging ---

ANAGRAM_LOG_FILE = os.environ.get("ANAGRAM_LOG_FILE")
ANAGRAM_LOG_LEVEL = os.environ.get("ANAGRAM_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class SessionConfig:
    chat_capacity: int = CHAT_MESSAGES_MAX
    tick_interval: float = TICK_INTERVAL


@dataclass(frozen=True)
class Theme:
    """rich style strings used by the terminal renderer."""

    header: str = "color(255) on color(26)"
    word: str = "bold color(255) on color(26)"
    chat_border: str = "color(68)"
    placeholder: str = "color(240)"
    prompt: str = "color(68)"
    error: str = "color(9)"
    hotkey: str = "bold color(8)"
    hotkey_tooltip: str = "color(8)"


DEFAULT_THEME = Theme()


def configure_logging(log_file: str | None = None, level: str | None = None) -> None:
    """Route log records to a file, never to the terminal the UI draws on.

    Without a log file the root logger gets a ``NullHandler`` so that
    Python's last-resort stderr handler stays silent.
    """
    log_file = log_file if log_file is not None else ANAGRAM_LOG_FILE
    level = level or ANAGRAM_LOG_LEVEL
    root = logging.getLogger()
    if not log_file:
        root.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))
