"""
Shot history entries.

Every scoring action appends exactly one shot to Game.shot_history. The log is
a closed set of shot types; each type carries the "old values" its undo needs,
so reversing the last action never has to guess:

- pocket / ball_click / deduction store the player's previous score
- set_won / rack_reset / rack_complete store every player's rack state
- multiplier / multiplier_all store the previous rack multiplier
- bowling_roll stores the frames as they were before the roll
- player_order_change stores the previous turn order

The history is never cleared on a rack transition; it is the undo log.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, ClassVar, Optional
import json

from models.japan import JapanRackResult
from models.player import BowlingFrame, PlayerSnapshot


class ShotType(str, Enum):
    """All possible shot history entry types."""

    # Set Match / Rotation
    POCKET = "pocket"
    SET_WON = "set_won"
    RACK_RESET = "rack_reset"

    # Bowlard
    BOWLING_ROLL = "bowling_roll"

    # Japan
    BALL_CLICK = "ball_click"
    MULTIPLIER = "multiplier"
    MULTIPLIER_ALL = "multiplier_all"
    DEDUCTION = "deduction"
    RACK_COMPLETE = "rack_complete"
    PLAYER_ORDER_CHANGE = "player_order_change"
    GAME_COMPLETE = "game_complete"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (tuple, list)):
        return [_encode(v) for v in value]
    return value


def _snapshots(raw: list) -> tuple[PlayerSnapshot, ...]:
    return tuple(PlayerSnapshot.from_dict(p) for p in raw)


def _frames(raw: list) -> tuple[BowlingFrame, ...]:
    return tuple(BowlingFrame.from_dict(f) for f in raw)


def _rack_result(raw: Optional[dict]) -> Optional[JapanRackResult]:
    return JapanRackResult.from_dict(raw) if raw is not None else None


@dataclass(frozen=True)
class Shot:
    """
    Base class for all shot history entries.

    Attributes:
        player_id: Player who made the shot (or whose turn it was).
        ball_number: Ball involved, 0 when the action has no ball.
        is_sunk: Whether a ball went down.
        is_foul: Whether the action penalised the player.
        timestamp: When the action happened (UTC).
    """

    shot_type: ClassVar[ShotType]
    _decoders: ClassVar[dict[str, Callable[[Any], Any]]] = {}

    player_id: str = ""
    ball_number: int = 0
    is_sunk: bool = False
    is_foul: bool = False
    timestamp: datetime = field(default_factory=_now, compare=False)

    def to_dict(self) -> dict:
        """Serialize shot to dictionary for JSON storage."""
        data = {"shot_type": self.shot_type.value}
        for f in fields(self):
            data[f.name] = _encode(getattr(self, f.name))
        return data

    def to_json(self) -> str:
        """Serialize shot to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict) -> "Shot":
        """Deserialize any shot type from a dictionary."""
        shot_cls = SHOT_TYPES[ShotType(d["shot_type"])]
        kwargs = {}
        for f in fields(shot_cls):
            if f.name not in d:
                continue
            raw = d[f.name]
            decoder = shot_cls._decoders.get(f.name)
            if f.name == "timestamp" and isinstance(raw, str):
                raw = datetime.fromisoformat(raw)
            elif decoder is not None:
                raw = decoder(raw)
            elif isinstance(raw, list):
                raw = tuple(raw)
            kwargs[f.name] = raw
        return shot_cls(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> "Shot":
        """Deserialize shot from JSON string."""
        return cls.from_dict(json.loads(json_str))


# =============================================================================
# Set Match / Rotation
# =============================================================================


@dataclass(frozen=True)
class PocketShot(Shot):
    """A numbered ball pocketed in Set Match or Rotation."""
    shot_type: ClassVar[ShotType] = ShotType.POCKET

    points: int = 0
    previous_score: int = 0
    score_entry_added: bool = False


@dataclass(frozen=True)
class SetWonShot(Shot):
    """A set awarded to player_id in Set Match."""
    shot_type: ClassVar[ShotType] = ShotType.SET_WON
    _decoders: ClassVar[dict] = {"previous_players": _snapshots}

    previous_players: tuple[PlayerSnapshot, ...] = ()
    previous_rack: int = 1


@dataclass(frozen=True)
class RackResetShot(Shot):
    """The table re-racked; auto is True when the session triggered it."""
    shot_type: ClassVar[ShotType] = ShotType.RACK_RESET
    _decoders: ClassVar[dict] = {"previous_players": _snapshots}

    previous_players: tuple[PlayerSnapshot, ...] = ()
    previous_rack: int = 1
    previous_total_racks: int = 1
    auto: bool = False


# =============================================================================
# Bowlard
# =============================================================================


@dataclass(frozen=True)
class BowlingRollShot(Shot):
    """One bowling roll recorded in frame_number."""
    shot_type: ClassVar[ShotType] = ShotType.BOWLING_ROLL
    _decoders: ClassVar[dict] = {"previous_frames": _frames}

    frame_number: int = 1
    pins: int = 0
    previous_frames: tuple[BowlingFrame, ...] = ()
    previous_score: int = 0


# =============================================================================
# Japan
# =============================================================================


@dataclass(frozen=True)
class BallClickShot(Shot):
    """A ball credited to a player in the current Japan rack."""
    shot_type: ClassVar[ShotType] = ShotType.BALL_CLICK

    points: int = 1
    previous_score: int = 0


@dataclass(frozen=True)
class MultiplierShot(Shot):
    """The rack multiplier set to an absolute value."""
    shot_type: ClassVar[ShotType] = ShotType.MULTIPLIER

    value: int = 1
    label: str = ""
    previous_multiplier: int = 1


@dataclass(frozen=True)
class MultiplierAllShot(Shot):
    """The rack multiplier scaled by factor for every player at once."""
    shot_type: ClassVar[ShotType] = ShotType.MULTIPLIER_ALL

    factor: float = 1.0
    value: int = 1
    previous_multiplier: int = 1


@dataclass(frozen=True)
class DeductionShot(Shot):
    """Points taken from a player's current rack."""
    shot_type: ClassVar[ShotType] = ShotType.DEDUCTION

    value: int = 0
    label: str = ""
    previous_score: int = 0


@dataclass(frozen=True)
class RackCompleteShot(Shot):
    """
    A rack closed and the next one started.

    rack_result is set when the rack was settled by redistribution. The legacy
    ball-count settlement leaves it None and fills player1_balls/player2_balls.
    """
    shot_type: ClassVar[ShotType] = ShotType.RACK_COMPLETE
    _decoders: ClassVar[dict] = {
        "previous_players": _snapshots,
        "rack_result": _rack_result,
    }

    previous_rack: int = 1
    previous_multiplier: int = 1
    previous_players: tuple[PlayerSnapshot, ...] = ()
    rack_result: Optional[JapanRackResult] = None
    player1_balls: Optional[int] = None
    player2_balls: Optional[int] = None


@dataclass(frozen=True)
class PlayerOrderChangeShot(Shot):
    """The turn order re-drawn with player_id going first."""
    shot_type: ClassVar[ShotType] = ShotType.PLAYER_ORDER_CHANGE

    previous_order: tuple[str, ...] = ()
    previous_player_index: int = 0
    new_order: tuple[str, ...] = ()


@dataclass(frozen=True)
class GameCompleteShot(Shot):
    """The game ended with the current rack settled but not advanced."""
    shot_type: ClassVar[ShotType] = ShotType.GAME_COMPLETE
    _decoders: ClassVar[dict] = {"rack_result": _rack_result}

    final_rack: int = 1
    final_multiplier: int = 1
    rack_result: Optional[JapanRackResult] = None


SHOT_TYPES: dict[ShotType, type[Shot]] = {
    ShotType.POCKET: PocketShot,
    ShotType.SET_WON: SetWonShot,
    ShotType.RACK_RESET: RackResetShot,
    ShotType.BOWLING_ROLL: BowlingRollShot,
    ShotType.BALL_CLICK: BallClickShot,
    ShotType.MULTIPLIER: MultiplierShot,
    ShotType.MULTIPLIER_ALL: MultiplierAllShot,
    ShotType.DEDUCTION: DeductionShot,
    ShotType.RACK_COMPLETE: RackCompleteShot,
    ShotType.PLAYER_ORDER_CHANGE: PlayerOrderChangeShot,
    ShotType.GAME_COMPLETE: GameCompleteShot,
}
