"""
Immutable game state.

A Game value describes one match completely: players in turn order, the rack
counters, the shot log used for undo, optional chess clock data and the Japan
extension block. Engines never mutate a Game; they build a new one with
dataclasses.replace() and the caller swaps its reference.

Usage:
    game = engine.initialize([{"name": "Alice"}, {"name": "Bob"}])
    game = engine.apply_action(game, PocketBall(ball_number=9))
    restored = Game.from_json(game.to_json())
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import json
import uuid

from models.clock import ChessClockSettings, ChessClockState
from models.events import Shot
from models.japan import JapanPlayerOrder, JapanRackResult, JapanSettings
from models.player import Player


class GameType(str, Enum):
    """Supported rule sets."""
    SET_MATCH = "SET_MATCH"
    ROTATION = "ROTATION"
    BOWLARD = "BOWLARD"
    JAPAN = "JAPAN"


class GameStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class ScoreEntry:
    """
    One point in a player's score progression.

    Attributes:
        player_id: Player whose score changed.
        score: Points the change added (a set win counts as 1).
        timestamp: When the change happened.
        ball_number: Ball that caused the change, if any.
    """
    player_id: str
    score: int
    timestamp: datetime = field(default_factory=_now, compare=False)
    ball_number: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "score": self.score,
            "timestamp": self.timestamp.isoformat(),
            "ball_number": self.ball_number,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ScoreEntry":
        return cls(
            player_id=d["player_id"],
            score=d["score"],
            timestamp=_parse_time(d.get("timestamp")) or _now(),
            ball_number=d.get("ball_number"),
        )


@dataclass(frozen=True)
class VictoryResult:
    """Outcome of a victory check."""
    is_game_over: bool
    winner_id: Optional[str] = None


@dataclass(frozen=True)
class Game:
    """
    Complete state of one match.

    Attributes:
        id: Unique game identifier.
        type: Rule set.
        players: Players in turn order.
        current_player_index: Index of the active player in players.
        status: IN_PROGRESS until victory or a manual end.
        start_time: When the game was created.
        end_time: When the game completed.
        winner: Winning player's id, None for single-player or drawn games.
        total_racks: Racks played so far, including the current one.
        current_rack: 1-based number of the rack being played.
        rack_in_progress: Whether the current rack has started.
        shot_history: Ordered log of scoring actions, newest last.
        score_history: Score progression entries, newest last.
        chess_clock: Clock settings when the game is timed.
        chess_clock_state: Last persisted clock state.
        japan_settings: Japan rule settings.
        japan_rack_history: Settled Japan racks, oldest first.
        japan_player_order_history: Japan order periods, oldest first.
        japan_current_multiplier: Multiplier of the current Japan rack.
    """
    type: GameType
    players: tuple[Player, ...]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    current_player_index: int = 0
    status: GameStatus = GameStatus.IN_PROGRESS
    start_time: datetime = field(default_factory=_now)
    end_time: Optional[datetime] = None
    winner: Optional[str] = None
    total_racks: int = 1
    current_rack: int = 1
    rack_in_progress: bool = False
    shot_history: tuple[Shot, ...] = ()
    score_history: tuple[ScoreEntry, ...] = ()
    chess_clock: Optional[ChessClockSettings] = None
    chess_clock_state: Optional[ChessClockState] = None
    japan_settings: Optional[JapanSettings] = None
    japan_rack_history: tuple[JapanRackResult, ...] = ()
    japan_player_order_history: tuple[JapanPlayerOrder, ...] = ()
    japan_current_multiplier: int = 1

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def last_shot(self) -> Optional[Shot]:
        return self.shot_history[-1] if self.shot_history else None

    def get_player(self, player_id: str) -> Optional[Player]:
        """Find a player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> Optional[int]:
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        return None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary, enough to fully resume."""
        return {
            "id": self.id,
            "type": self.type.value,
            "players": [p.to_dict() for p in self.players],
            "current_player_index": self.current_player_index,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "winner": self.winner,
            "total_racks": self.total_racks,
            "current_rack": self.current_rack,
            "rack_in_progress": self.rack_in_progress,
            "shot_history": [s.to_dict() for s in self.shot_history],
            "score_history": [e.to_dict() for e in self.score_history],
            "chess_clock": self.chess_clock.to_dict() if self.chess_clock else None,
            "chess_clock_state": (
                self.chess_clock_state.to_dict() if self.chess_clock_state else None
            ),
            "japan_settings": self.japan_settings.to_dict() if self.japan_settings else None,
            "japan_rack_history": [r.to_dict() for r in self.japan_rack_history],
            "japan_player_order_history": [
                o.to_dict() for o in self.japan_player_order_history
            ],
            "japan_current_multiplier": self.japan_current_multiplier,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Game":
        """Rebuild a game from to_dict() output."""
        clock = d.get("chess_clock")
        clock_state = d.get("chess_clock_state")
        japan = d.get("japan_settings")
        return cls(
            id=d["id"],
            type=GameType(d["type"]),
            players=tuple(Player.from_dict(p) for p in d["players"]),
            current_player_index=d.get("current_player_index", 0),
            status=GameStatus(d.get("status", GameStatus.IN_PROGRESS.value)),
            start_time=_parse_time(d.get("start_time")) or _now(),
            end_time=_parse_time(d.get("end_time")),
            winner=d.get("winner"),
            total_racks=d.get("total_racks", 1),
            current_rack=d.get("current_rack", 1),
            rack_in_progress=d.get("rack_in_progress", False),
            shot_history=tuple(Shot.from_dict(s) for s in d.get("shot_history", [])),
            score_history=tuple(
                ScoreEntry.from_dict(e) for e in d.get("score_history", [])
            ),
            chess_clock=ChessClockSettings.from_dict(clock) if clock else None,
            chess_clock_state=ChessClockState.from_dict(clock_state) if clock_state else None,
            japan_settings=JapanSettings.from_dict(japan) if japan else None,
            japan_rack_history=tuple(
                JapanRackResult.from_dict(r) for r in d.get("japan_rack_history", [])
            ),
            japan_player_order_history=tuple(
                JapanPlayerOrder.from_dict(o)
                for o in d.get("japan_player_order_history", [])
            ),
            japan_current_multiplier=d.get("japan_current_multiplier", 1),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "Game":
        return cls.from_dict(json.loads(json_str))
