"""WebSocket protocol constants: message tags, outbound literals, local commands.

Pure data module -- no imports, no logic. Safe to import from any client
module without risk of circular dependencies.
"""

# ── Server -> Client message types ────────────────────────────────────

MSG_CHAT_MESSAGE = "ChatMessage"
MSG_ONGOING_ROUND_INFO = "OngoingRoundInfo"
MSG_FINISHED_ROUND_INFO = "FinishedRoundInfo"
MSG_FINISHED_GAME = "FinishedGame"
MSG_PONG_MESSAGE = "PongMessage"

# ── Client -> Server literals ─────────────────────────────────────────

PING_PAYLOAD = "/ping"

# ── Local commands typed into the input line ──────────────────────────

CMD_EXIT = "/exit"
CMD_CLEAR = "/clear"
CMD_PING = PING_PAYLOAD

# ── Header texts per round phase ──────────────────────────────────────

GUIDE_AWAITING_START = "WAITING ROUND START!"
GUIDE_ACTIVE = "PLEASE GUESS!"
GUIDE_REVEALED = "TIME'S UP! THE ANSWER:"

# ── Input placeholders ────────────────────────────────────────────────

PLACEHOLDER_CONNECTING = "connecting..."
PLACEHOLDER_CONNECTED = "message/answer here, send with Enter"
PLACEHOLDER_DISCONNECTED = "disconnected, Ctrl+C to exit"
