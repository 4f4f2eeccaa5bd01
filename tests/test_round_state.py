"""Tests for anagram.round_state -- phase transitions and countdown arithmetic."""

from datetime import datetime, timedelta, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from anagram.messages import Chat, GameFinished, Pong, RoundFinished, RoundStarted, Unrecognized
from anagram.round_state import (
    Active,
    AwaitingStart,
    Revealed,
    advance,
    display_word,
    format_countdown,
    guide_text,
    remaining,
)

NOW = datetime(2099, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

# Offsets up to a day either side of NOW, millisecond resolution
offsets = st.integers(min_value=-86_400_000, max_value=86_400_000).map(
    lambda ms: timedelta(milliseconds=ms)
)
phases = st.sampled_from([
    AwaitingStart(),
    Active("ppael", NOW),
    Revealed("apple", NOW + timedelta(seconds=3)),
])


# ===================================================================
# Transitions
# ===================================================================


class TestTransitions:

    def test_round_started_activates(self):
        phase, error = advance(AwaitingStart(), RoundStarted("ppael", NOW + timedelta(seconds=10)), NOW)
        assert phase == Active("ppael", NOW + timedelta(seconds=10))
        assert error is None

    def test_round_finished_reveals(self):
        phase, error = advance(Active("ppael", NOW), RoundFinished("apple", NOW + timedelta(seconds=5)), NOW)
        assert phase == Revealed("apple", NOW + timedelta(seconds=5))
        assert error is None

    def test_game_finished_resets(self):
        phase, _ = advance(Revealed("apple", NOW), GameFinished(), NOW)
        assert phase == AwaitingStart()

    def test_bad_deadline_falls_back_to_now(self):
        phase, error = advance(AwaitingStart(), RoundStarted("ppael", None, error="bad time"), NOW)
        assert phase == Active("ppael", NOW)
        assert error == "bad time"
        assert remaining(phase, NOW) == timedelta(0)

    @given(phase=phases)
    def test_non_round_events_leave_phase_alone(self, phase):
        for event in (Chat("hi"), Pong(), Unrecognized("Weird")):
            assert advance(phase, event, NOW) == (phase, None)

    @given(phase=phases)
    def test_round_events_replace_phase_unconditionally(self, phase):
        started, _ = advance(phase, RoundStarted("new", NOW), NOW)
        assert started == Active("new", NOW)
        finished, _ = advance(phase, RoundFinished("ans", NOW), NOW)
        assert finished == Revealed("ans", NOW)
        reset, _ = advance(phase, GameFinished(), NOW)
        assert reset == AwaitingStart()


# ===================================================================
# Countdown
# ===================================================================


class TestCountdown:

    @given(offset=offsets)
    @settings(max_examples=200)
    def test_remaining_is_clamped_difference(self, offset):
        phase = Active("w", NOW + offset)
        assert remaining(phase, NOW) == max(timedelta(0), offset)

    @given(offset=offsets)
    def test_remaining_never_negative(self, offset):
        assert remaining(Revealed("w", NOW + offset), NOW) >= timedelta(0)

    def test_awaiting_start_has_no_countdown(self):
        assert remaining(AwaitingStart(), NOW) == timedelta(0)

    def test_format_countdown(self):
        assert format_countdown(timedelta(seconds=9, milliseconds=500)) == "9.5s"
        assert format_countdown(timedelta(seconds=10)) == "10.0s"
        assert format_countdown(timedelta(milliseconds=1249)) == "1.2s"
        assert format_countdown(timedelta(milliseconds=1250)) == "1.3s"
        assert format_countdown(timedelta(0)) == "0.0s"
        assert format_countdown(timedelta(seconds=-3)) == "0.0s"


# ===================================================================
# Display text
# ===================================================================


class TestDisplayText:

    def test_guide_texts(self):
        assert guide_text(AwaitingStart()) == "WAITING ROUND START!"
        assert guide_text(Active("ppael", NOW)) == "PLEASE GUESS!"
        assert guide_text(Revealed("apple", NOW)) == "TIME'S UP! THE ANSWER:"

    def test_display_word(self):
        assert display_word(AwaitingStart()) == ""
        assert display_word(Active("ppael", NOW)) == "ppael"
        assert display_word(Revealed("apple", NOW)) == "apple"
