"""Shared fixtures for the anagram client test suite."""

import asyncio
import socket
import sys
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect

# Ensure the project root is on sys.path so 'anagram' package resolves
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from anagram.session import Session  # noqa: E402

FIXED_NOW = datetime(2099, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Bare Object Factory: skip __init__ for GameClient
# ---------------------------------------------------------------------------

def make_bare_client(*, conn=None, now=FIXED_NOW):
    """Create a GameClient with __new__ (skip __init__).

    The connection is an AsyncMock and the clock is frozen at *now*, so
    effects can be driven one event at a time without a network.
    """
    from anagram.client import GameClient

    client = GameClient.__new__(GameClient)
    client.url = "ws://test.invalid/ws/anagram/1"
    client.session = Session.new()
    client.conn = conn if conn is not None else AsyncMock()
    client.ping_interval = 10.0
    client._render = MagicMock()
    client._clock = lambda: now
    client._events = asyncio.Queue()
    client._tasks = set()
    client._read_task = None
    client._keepalive_task = None
    return client


@pytest.fixture
def now():
    return FIXED_NOW


# ---------------------------------------------------------------------------
# Scripted game server (FastAPI WebSocket route served by uvicorn)
# ---------------------------------------------------------------------------

class ScriptedGameServer:
    """Plays ``frames`` to every client that connects, then records what it sends.

    Dict frames are sent as JSON, str frames verbatim. A ``/ping`` is answered
    with a ``PongMessage`` like the real game server does.
    """

    def __init__(self):
        self.frames: list = []
        self.received: list[str] = []
        self.close_after_script = False
        self.url = ""
        self.app = FastAPI()

        @self.app.websocket("/ws/anagram/1")
        async def game(websocket: WebSocket):
            await websocket.accept()
            for frame in self.frames:
                if isinstance(frame, str):
                    await websocket.send_text(frame)
                else:
                    await websocket.send_json(frame)
            if self.close_after_script:
                await websocket.close()
                return
            try:
                while True:
                    text = await websocket.receive_text()
                    self.received.append(text)
                    if text == "/ping":
                        await websocket.send_json({"type": "PongMessage", "content": None})
            except WebSocketDisconnect:
                pass


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def game_server():
    server = ScriptedGameServer()
    port = free_port()
    config = uvicorn.Config(server.app, host="127.0.0.1", port=port, log_level="warning", lifespan="off")
    uv_server = uvicorn.Server(config)
    thread = threading.Thread(target=uv_server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not uv_server.started:
        if time.monotonic() > deadline or not thread.is_alive():
            raise RuntimeError("scripted game server did not start")
        time.sleep(0.01)

    server.url = f"ws://127.0.0.1:{port}/ws/anagram/1"
    yield server

    uv_server.should_exit = True
    thread.join(timeout=5)
