"""Models package for the scorekeeper core."""

from .actions import Action, InvalidActionError, parse_action
from .clock import ChessClockSettings, ChessClockState, PlayerClockState
from .events import Shot, ShotType
from .game_state import Game, GameStatus, GameType, ScoreEntry, VictoryResult
from .japan import (
    JapanDeduction,
    JapanMultiplier,
    JapanPlayerOrder,
    JapanPlayerRackResult,
    JapanRackResult,
    JapanSettings,
)
from .player import BowlingFrame, Player, PlayerSnapshot

__all__ = [
    "Action",
    "InvalidActionError",
    "parse_action",
    "ChessClockSettings",
    "ChessClockState",
    "PlayerClockState",
    "Shot",
    "ShotType",
    "Game",
    "GameStatus",
    "GameType",
    "ScoreEntry",
    "VictoryResult",
    "JapanDeduction",
    "JapanMultiplier",
    "JapanPlayerOrder",
    "JapanPlayerRackResult",
    "JapanRackResult",
    "JapanSettings",
    "BowlingFrame",
    "Player",
    "PlayerSnapshot",
]
