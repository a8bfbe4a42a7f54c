"""
Chess clock settings and the persisted clock state.

Times in settings are minutes (as entered at setup); remaining times in the
state are seconds.
"""

from dataclasses import dataclass
from typing import Optional

from constants import DEFAULT_TIME_LIMIT_MINUTES, DEFAULT_WARNING_MINUTES


@dataclass(frozen=True)
class ChessClockSettings:
    """
    Chess clock configuration.

    Attributes:
        enabled: Whether the clock is shown at all.
        individual_time: Each player has their own time limit.
        time_limit: Shared time limit in minutes.
        warning_enabled: Whether the warning threshold is configured.
        warning_time: Warning threshold in minutes.
        player1_time_limit: Player 1 limit in minutes (individual_time only).
        player2_time_limit: Player 2 limit in minutes (individual_time only).
    """
    enabled: bool = False
    individual_time: bool = False
    time_limit: float = DEFAULT_TIME_LIMIT_MINUTES
    warning_enabled: bool = False
    warning_time: float = DEFAULT_WARNING_MINUTES
    player1_time_limit: Optional[float] = None
    player2_time_limit: Optional[float] = None

    def limit_for(self, player_index: int) -> float:
        """Time limit in seconds for the player at player_index."""
        minutes = self.time_limit
        if self.individual_time:
            individual = (self.player1_time_limit, self.player2_time_limit)
            if player_index < len(individual) and individual[player_index]:
                minutes = individual[player_index]
        return minutes * 60

    @property
    def warning_seconds(self) -> float:
        return self.warning_time * 60

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "individual_time": self.individual_time,
            "time_limit": self.time_limit,
            "warning_enabled": self.warning_enabled,
            "warning_time": self.warning_time,
            "player1_time_limit": self.player1_time_limit,
            "player2_time_limit": self.player2_time_limit,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ChessClockSettings":
        return cls(
            enabled=d.get("enabled", False),
            individual_time=d.get("individual_time", False),
            time_limit=d.get("time_limit", DEFAULT_TIME_LIMIT_MINUTES),
            warning_enabled=d.get("warning_enabled", False),
            warning_time=d.get("warning_time", DEFAULT_WARNING_MINUTES),
            player1_time_limit=d.get("player1_time_limit"),
            player2_time_limit=d.get("player2_time_limit"),
        )


@dataclass(frozen=True)
class PlayerClockState:
    """Remaining time for one player."""
    remaining_time: float
    is_warning: bool = False
    is_time_up: bool = False

    def to_dict(self) -> dict:
        return {
            "remaining_time": self.remaining_time,
            "is_warning": self.is_warning,
            "is_time_up": self.is_time_up,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PlayerClockState":
        return cls(
            remaining_time=float(d["remaining_time"]),
            is_warning=d.get("is_warning", False),
            is_time_up=d.get("is_time_up", False),
        )


@dataclass(frozen=True)
class ChessClockState:
    """
    Full observable clock state, enough to resume a paused or running clock.

    Attributes:
        player_times: Per-player remaining time.
        is_running: Whether the active player's time is counting down.
        last_tick_timestamp: Wall-clock seconds of the last settled tick.
        active_player_index: Whose time is counting down while running.
    """
    player_times: tuple[PlayerClockState, ...]
    is_running: bool = False
    last_tick_timestamp: float = 0.0
    active_player_index: int = 0

    def to_dict(self) -> dict:
        return {
            "player_times": [p.to_dict() for p in self.player_times],
            "is_running": self.is_running,
            "last_tick_timestamp": self.last_tick_timestamp,
            "active_player_index": self.active_player_index,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ChessClockState":
        return cls(
            player_times=tuple(PlayerClockState.from_dict(p) for p in d["player_times"]),
            is_running=d.get("is_running", False),
            last_tick_timestamp=float(d.get("last_tick_timestamp", 0.0)),
            active_player_index=d.get("active_player_index", 0),
        )
