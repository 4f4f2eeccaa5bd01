"""Tests for anagram.commands -- interpreting submitted input lines."""

from hypothesis import given
from hypothesis import strategies as st

from anagram.commands import (
    PING_REJECTED_MESSAGE,
    ClearChat,
    NoOp,
    OutboundPayload,
    Quit,
    Rejected,
    submit,
)

padding = st.text(alphabet=" \t", max_size=3)


class TestLocalCommands:

    @given(connected=st.booleans(), left=padding, right=padding)
    def test_exit_always_quits(self, connected, left, right):
        assert submit(f"{left}/exit{right}", connected) == Quit()

    @given(connected=st.booleans())
    def test_ping_always_rejected(self, connected):
        result = submit("/ping", connected)
        assert isinstance(result, Rejected)
        assert result.message == PING_REJECTED_MESSAGE

    @given(connected=st.booleans())
    def test_clear_works_without_connection(self, connected):
        assert submit("/clear", connected) == ClearChat()

    def test_commands_are_exact_matches(self):
        assert submit("/exit now", True) == OutboundPayload("/exit now")
        assert submit("/CLEAR", True) == OutboundPayload("/CLEAR")


class TestPayloads:

    @given(connected=st.booleans(), blank=padding)
    def test_blank_line_is_noop(self, connected, blank):
        assert submit(blank, connected) == NoOp()

    def test_text_sent_trimmed_when_connected(self):
        assert submit("  apple \n", True) == OutboundPayload("apple")

    def test_text_ignored_while_disconnected(self):
        assert submit("apple", False) == NoOp()
