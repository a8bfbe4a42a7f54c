"""
Test suite for the drift-corrected chess clock.

Verifies:
- Remaining time tracks wall-clock time regardless of tick spacing
- Remaining time never goes negative
- Time-up fires exactly once per player
- Button presses hand the clock to the other player

Run with: pytest test_chess_clock.py -v
"""

import asyncio
import random

import pytest

from chess_clock import ChessClock, ClockTicker
from models.clock import ChessClockSettings


class FakeTime:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def settings():
    return ChessClockSettings(enabled=True, time_limit=1, warning_enabled=True, warning_time=0.5)


@pytest.fixture
def clock(settings, fake_time):
    return ChessClock(settings, time_source=fake_time)


class TestSettings:
    """Minutes in settings, seconds in state."""

    def test_shared_limit(self, clock):
        assert clock.remaining(0) == 60
        assert clock.remaining(1) == 60

    def test_individual_limits(self, fake_time):
        settings = ChessClockSettings(
            enabled=True,
            individual_time=True,
            time_limit=10,
            player1_time_limit=5,
            player2_time_limit=None,
        )
        clock = ChessClock(settings, time_source=fake_time)
        assert clock.remaining(0) == 300
        assert clock.remaining(1) == 600


class TestDriftCorrection:
    """Time is measured, not counted."""

    def test_not_running_ignores_ticks(self, clock, fake_time):
        fake_time.advance(10)
        clock.tick()
        assert clock.remaining(0) == 60

    def test_random_tick_spacing_matches_wall_clock(self, clock, fake_time):
        rng = random.Random(5)
        clock.start()
        spent = 0.0
        gaps = [rng.uniform(0.01, 0.3) for _ in range(50)] + [5.0]
        for gap in gaps:
            fake_time.advance(gap)
            spent += gap
            clock.tick()
        assert clock.remaining(0) == pytest.approx(60 - spent)
        assert clock.remaining(1) == 60

    def test_random_gaps_across_turns(self, clock, fake_time):
        rng = random.Random(17)
        clock.start()
        spent = [0.0, 0.0]
        gaps = [rng.uniform(0.01, 0.5) for _ in range(80)]
        gaps.insert(40, 5.0)
        for gap in gaps:
            fake_time.advance(gap)
            spent[clock.active_player_index] += gap
            if rng.random() < 0.3:
                clock.select_player(clock.active_player_index)
            else:
                clock.tick()

        clock.tick()
        for i in (0, 1):
            assert clock.remaining(i) == pytest.approx(max(0.0, 60 - spent[i]))
            assert clock.remaining(i) >= 0

    def test_skipped_ticks_are_caught_up(self, clock, fake_time):
        clock.start()
        fake_time.advance(5)
        clock.tick()
        assert clock.remaining(0) == pytest.approx(55)

    def test_clock_going_backwards_is_ignored(self, clock, fake_time):
        clock.start()
        fake_time.advance(-3)
        clock.tick()
        assert clock.remaining(0) == 60

    def test_stop_settles_elapsed_time(self, clock, fake_time):
        clock.start()
        fake_time.advance(4)
        clock.stop()
        fake_time.advance(100)
        clock.tick()
        assert clock.remaining(0) == pytest.approx(56)
        assert not clock.is_running

    def test_toggle(self, clock):
        assert clock.toggle().is_running
        assert not clock.toggle().is_running


class TestWarningAndTimeUp:
    """Thresholds and the time-up callback."""

    def test_warning_threshold(self, clock, fake_time):
        clock.start()
        fake_time.advance(29)
        clock.tick()
        assert not clock.state.player_times[0].is_warning
        fake_time.advance(2)
        clock.tick()
        assert clock.state.player_times[0].is_warning

    def test_never_negative_and_fires_once(self, settings, fake_time):
        fired = []
        clock = ChessClock(settings, time_source=fake_time, on_time_up=fired.append)
        clock.start()
        for _ in range(5):
            fake_time.advance(30)
            clock.tick()
            assert clock.remaining(0) >= 0

        assert clock.remaining(0) == 0
        assert clock.state.player_times[0].is_time_up
        assert fired == [0]

    def test_time_up_keeps_clock_running(self, clock, fake_time):
        clock.start()
        fake_time.advance(61)
        clock.tick()
        assert clock.is_running


class TestSelectPlayer:
    """Pressing a player's button starts the other player's time."""

    def test_press_hands_over(self, clock, fake_time):
        clock.start()
        fake_time.advance(10)
        clock.select_player(0)
        assert clock.active_player_index == 1
        fake_time.advance(5)
        clock.tick()
        assert clock.remaining(0) == pytest.approx(50)
        assert clock.remaining(1) == pytest.approx(55)

    def test_press_when_stopped_only_switches(self, clock):
        clock.select_player(0)
        assert clock.active_player_index == 1
        assert not clock.is_running

    def test_pressing_timed_out_player_stops_clock(self, clock, fake_time):
        clock.start()
        fake_time.advance(70)
        clock.select_player(0)
        assert not clock.is_running
        assert clock.active_player_index == 1

    def test_unknown_player_ignored(self, clock):
        before = clock.state
        assert clock.select_player(5) == before


class TestRestore:
    """Resuming a saved clock."""

    def test_resume_running_clock(self, settings, clock, fake_time):
        clock.start()
        fake_time.advance(10)
        clock.tick()
        saved = clock.state

        fake_time.advance(20)
        resumed = ChessClock(settings, state=saved, time_source=fake_time)
        resumed.tick()
        assert resumed.remaining(0) == pytest.approx(30)


class TestClockTicker:
    """Background ticking on the event loop."""

    @pytest.mark.asyncio
    async def test_ticker_drives_clock(self, settings, fake_time):
        clock = ChessClock(settings, time_source=fake_time)
        clock.start()
        ticker = ClockTicker(clock, interval=0.01)
        await ticker.start()
        assert ticker.running

        fake_time.advance(3)
        await asyncio.sleep(0.05)
        await ticker.stop()

        assert not ticker.running
        assert clock.remaining(0) == pytest.approx(57)

    @pytest.mark.asyncio
    async def test_stop_without_start(self, clock):
        ticker = ClockTicker(clock)
        await ticker.stop()
        assert not ticker.running
