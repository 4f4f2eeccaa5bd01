"""Command-line entry: ``python -m anagram [URL]``."""

import argparse
import logging
import sys

from .config import DEFAULT_URL, configure_logging
from .tui import run_tui

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="anagram",
        description="Terminal client for the real-time anagram guessing game",
    )
    parser.add_argument(
        "url",
        nargs="?",
        default=DEFAULT_URL,
        help=f"game server WebSocket URL (default: {DEFAULT_URL})",
    )
    args = parser.parse_args(argv)

    configure_logging()
    try:
        return run_tui(args.url)
    except (RuntimeError, OSError) as exc:
        logger.exception("Error running program")
        print(f"Error running program: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
