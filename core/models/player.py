"""
Player-level value types.

Players, bowling frames and the per-player snapshots that shots keep so an
action can be reversed exactly. All values are frozen; engines derive new
ones with dataclasses.replace().
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BowlingFrame:
    """
    One frame of a Bowlard game.

    Attributes:
        frame_number: 1-10.
        rolls: Pin counts for each roll (max 2 for frames 1-9, max 3 for frame 10).
        score: Cumulative score up to this frame, None until the frame has rolls.
        is_strike: First roll knocked down all pins.
        is_spare: Two rolls knocked down all pins.
        is_complete: No further rolls belong to this frame.
    """
    frame_number: int
    rolls: tuple[int, ...] = ()
    score: Optional[int] = None
    is_strike: bool = False
    is_spare: bool = False
    is_complete: bool = False

    def to_dict(self) -> dict:
        return {
            "frame_number": self.frame_number,
            "rolls": list(self.rolls),
            "score": self.score,
            "is_strike": self.is_strike,
            "is_spare": self.is_spare,
            "is_complete": self.is_complete,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BowlingFrame":
        return cls(
            frame_number=d["frame_number"],
            rolls=tuple(d.get("rolls", [])),
            score=d.get("score"),
            is_strike=d.get("is_strike", False),
            is_spare=d.get("is_spare", False),
            is_complete=d.get("is_complete", False),
        )


@dataclass(frozen=True)
class Player:
    """
    A player in a match.

    Attributes:
        id: Stable identifier ("player-1", "player-2", ...).
        name: Display name.
        score: Variant-defined score (rack points, total points, pins).
        balls_pocketed: Balls pocketed this rack, in pocket order.
        is_active: Whether it is this player's turn.
        target_score: Rotation handicap target.
        target_sets: Set Match handicap target.
        sets_won: Sets won in a Set Match game.
        bowling_frames: Frames for a Bowlard game.
    """
    id: str
    name: str
    score: int = 0
    balls_pocketed: tuple[int, ...] = ()
    is_active: bool = False
    target_score: Optional[int] = None
    target_sets: Optional[int] = None
    sets_won: int = 0
    bowling_frames: Optional[tuple[BowlingFrame, ...]] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "balls_pocketed": list(self.balls_pocketed),
            "is_active": self.is_active,
            "target_score": self.target_score,
            "target_sets": self.target_sets,
            "sets_won": self.sets_won,
            "bowling_frames": (
                [f.to_dict() for f in self.bowling_frames]
                if self.bowling_frames is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Player":
        """Create from dictionary."""
        frames = d.get("bowling_frames")
        return cls(
            id=d["id"],
            name=d["name"],
            score=d.get("score", 0),
            balls_pocketed=tuple(d.get("balls_pocketed", [])),
            is_active=d.get("is_active", False),
            target_score=d.get("target_score"),
            target_sets=d.get("target_sets"),
            sets_won=d.get("sets_won", 0),
            bowling_frames=(
                tuple(BowlingFrame.from_dict(f) for f in frames)
                if frames is not None else None
            ),
        )


@dataclass(frozen=True)
class PlayerSnapshot:
    """
    The rack-local part of a player captured before a rack-level action.

    Stored inside shots so undo can put the player back exactly.
    """
    id: str
    balls_pocketed: tuple[int, ...] = ()
    score: int = 0
    sets_won: int = 0

    @classmethod
    def of(cls, player: Player) -> "PlayerSnapshot":
        return cls(
            id=player.id,
            balls_pocketed=player.balls_pocketed,
            score=player.score,
            sets_won=player.sets_won,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "balls_pocketed": list(self.balls_pocketed),
            "score": self.score,
            "sets_won": self.sets_won,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PlayerSnapshot":
        return cls(
            id=d["id"],
            balls_pocketed=tuple(d.get("balls_pocketed", [])),
            score=d.get("score", 0),
            sets_won=d.get("sets_won", 0),
        )
