"""
Small helpers around a Game value used by callers of the engines.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from constants import ROTATION_BALLS
from models.game_state import Game, GameStatus, GameType
from models.player import Player


def is_game_in_progress(game: Optional[Game]) -> bool:
    """
    Whether a saved game is worth offering to resume.

    A game counts as in progress when it has not completed and something has
    happened in it (a shot, a settled rack or a roll).
    """
    if game is None or game.status != GameStatus.IN_PROGRESS:
        return False
    return bool(game.shot_history) or bool(game.japan_rack_history)


def remaining_score(player: Player) -> int:
    """Points a Rotation player still needs to reach their target."""
    if not player.target_score:
        return 0
    return max(0, player.target_score - player.score)


def all_balls_pocketed(game: Game) -> bool:
    """Whether every ball of a Rotation rack has been pocketed."""
    if game.type != GameType.ROTATION:
        return False
    pocketed = {ball for p in game.players for ball in p.balls_pocketed}
    return set(ROTATION_BALLS) <= pocketed


def rematch_setups(game: Game) -> list[dict]:
    """Player setups for a new game with the same players and targets."""
    return [
        {
            "name": p.name,
            "target_score": p.target_score,
            "target_sets": p.target_sets,
        }
        for p in game.players
    ]


def game_duration(game: Game, now: Optional[datetime] = None) -> timedelta:
    """Time from start to end, or to now while the game is still running."""
    end = game.end_time or now or datetime.now(timezone.utc)
    return max(timedelta(0), end - game.start_time)


def format_duration(duration: timedelta) -> str:
    """Format as H:MM:SS, or M:SS under an hour."""
    total = int(duration.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"
