"""
Drift-corrected chess clock.

The clock never counts ticks. Each tick measures the wall-clock time since the
previous tick and takes it off the active player only, so ticks can arrive
late, be coalesced or be skipped entirely (a suspended device) and the
remaining time is still exact:

    remaining = max(0, limit - time spent while active)

ClockTicker drives tick() from an asyncio task. It holds no timing state of
its own; stopping it just stops scheduling ticks.
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Callable, Optional

from constants import DEFAULT_TICK_INTERVAL
from models.clock import ChessClockSettings, ChessClockState, PlayerClockState


logger = logging.getLogger(__name__)


class ChessClock:
    """
    Per-player countdown for a head-to-head match.

    Pressing a player's button (select_player) hands the clock to the other
    player. A player running out of time triggers on_time_up once; the clock
    keeps running until someone presses the button of the player who is out
    of time or stops it.
    """

    def __init__(
        self,
        settings: ChessClockSettings,
        player_count: int = 2,
        state: Optional[ChessClockState] = None,
        time_source: Callable[[], float] = time.time,
        on_time_up: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize the clock.

        Args:
            settings: Time limits and warning threshold.
            player_count: Number of players sharing the clock.
            state: Previously saved state to resume from.
            time_source: Returns the current wall-clock time in seconds.
            on_time_up: Called with the player index when their time runs out.
        """
        self.settings = settings
        self.player_count = player_count
        self.time_source = time_source
        self.on_time_up = on_time_up
        self._state = state or ChessClockState(
            player_times=tuple(
                PlayerClockState(remaining_time=settings.limit_for(i))
                for i in range(player_count)
            ),
        )

    @property
    def state(self) -> ChessClockState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def active_player_index(self) -> int:
        return self._state.active_player_index

    def remaining(self, player_index: int) -> float:
        return self._state.player_times[player_index].remaining_time

    def restore(self, state: ChessClockState) -> None:
        """Resume from a saved state, including a clock that was running."""
        self._state = state

    def start(self, now: Optional[float] = None) -> ChessClockState:
        if self._state.is_running:
            return self._state
        now = self.time_source() if now is None else now
        self._state = replace(self._state, is_running=True, last_tick_timestamp=now)
        logger.debug(f"Clock started for player {self._state.active_player_index}")
        return self._state

    def stop(self, now: Optional[float] = None) -> ChessClockState:
        """Settle the time used so far and stop counting."""
        if not self._state.is_running:
            return self._state
        self.tick(now)
        self._state = replace(self._state, is_running=False)
        logger.debug("Clock stopped")
        return self._state

    def toggle(self, now: Optional[float] = None) -> ChessClockState:
        if self._state.is_running:
            return self.stop(now)
        return self.start(now)

    def tick(self, now: Optional[float] = None) -> ChessClockState:
        """
        Take the time since the last tick off the active player.

        Args:
            now: Current time in seconds; read from the time source when omitted.

        Returns:
            The updated state.
        """
        state = self._state
        if not state.is_running:
            return state

        now = self.time_source() if now is None else now
        elapsed = max(0.0, now - state.last_tick_timestamp)
        index = state.active_player_index
        times = list(state.player_times)
        current = times[index]
        fired = False

        if not current.is_time_up and elapsed > 0:
            remaining = max(0.0, current.remaining_time - elapsed)
            is_time_up = remaining <= 0
            fired = is_time_up and not current.is_time_up
            times[index] = PlayerClockState(
                remaining_time=remaining,
                is_warning=remaining <= self.settings.warning_seconds,
                is_time_up=is_time_up,
            )

        self._state = replace(state, player_times=tuple(times), last_tick_timestamp=now)

        if fired:
            logger.info(f"Player {index} is out of time")
            if self.on_time_up:
                self.on_time_up(index)
        return self._state

    def select_player(self, player_index: int, now: Optional[float] = None) -> ChessClockState:
        """
        Press player_index's button: the other player's time starts counting.

        Pressing the button of a player who is already out of time also stops
        the clock.
        """
        if not 0 <= player_index < self.player_count:
            logger.warning(f"Ignoring clock press for unknown player {player_index}")
            return self._state

        self.tick(now)
        state = self._state
        is_running = state.is_running
        if state.player_times[player_index].is_time_up:
            is_running = False

        self._state = replace(
            state,
            is_running=is_running,
            active_player_index=(player_index + 1) % self.player_count,
        )
        return self._state


class ClockTicker:
    """
    Background task that ticks a ChessClock on an interval.

    Usage:
        ticker = ClockTicker(clock)
        await ticker.start()
        ...
        await ticker.stop()
    """

    def __init__(self, clock: ChessClock, interval: float = DEFAULT_TICK_INTERVAL):
        self.clock = clock
        self.interval = interval
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start ticking in the background."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._tick_loop())
        logger.debug(f"Clock ticker started (interval={self.interval}s)")

    async def stop(self) -> None:
        """Stop ticking; no tick runs after this returns."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.debug("Clock ticker stopped")

    async def _tick_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval)
            if not self._running:
                break
            try:
                self.clock.tick()
            except Exception as e:
                logger.error(f"Clock tick failed: {e}", exc_info=True)
