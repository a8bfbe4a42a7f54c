"""
Helpers shared by all rule set engines.

Every engine exposes the same four operations (see GameEngine). These helpers
cover the parts that do not depend on the rule set: building players, turn
bookkeeping, action dispatch and restoring player snapshots on undo.
"""

import logging
from dataclasses import replace
from typing import Any, Iterable, Optional, Protocol, Union

from models.actions import Action, parse_action
from models.events import Shot
from models.game_state import Game, GameType, ScoreEntry, VictoryResult
from models.player import Player, PlayerSnapshot


logger = logging.getLogger(__name__)


class GameEngine(Protocol):
    """Operations every rule set engine provides."""

    game_type: GameType

    def initialize(self, player_setups: list[dict], settings: Optional[Any] = None) -> Game:
        ...

    def apply_action(self, game: Game, action: Union[Action, dict]) -> Game:
        ...

    def undo(self, game: Game) -> Game:
        ...

    def check_victory(self, game: Game) -> VictoryResult:
        ...


# =============================================================================
# Initialization
# =============================================================================

def initialize_players(player_setups: list[dict]) -> tuple[Player, ...]:
    """
    Build players from setup dictionaries.

    Args:
        player_setups: Dicts with "name" and optional "target_score" / "target_sets".

    Returns:
        Players with ids player-1, player-2, ...; the first one active.
    """
    return tuple(
        Player(
            id=f"player-{i + 1}",
            name=setup.get("name") or f"Player {i + 1}",
            is_active=i == 0,
            target_score=setup.get("target_score"),
            target_sets=setup.get("target_sets"),
        )
        for i, setup in enumerate(player_setups)
    )


def initial_game(game_type: GameType, players: tuple[Player, ...], **extra) -> Game:
    """A fresh game on rack 1 with one zero score entry per player."""
    game = Game(
        type=game_type,
        players=players,
        rack_in_progress=True,
        score_history=tuple(ScoreEntry(player_id=p.id, score=0) for p in players),
        **extra,
    )
    logger.debug(
        f"Initialized {game_type.value} game with {len(players)} players",
        extra={"game_id": game.id, "game_type": game_type.value},
    )
    return game


# =============================================================================
# Dispatch
# =============================================================================

def coerce_action(action: Union[Action, dict]) -> Action:
    """Validate raw dictionaries; pass action models through."""
    if isinstance(action, dict):
        return parse_action(action)
    return action


def dispatch(engine: Any, game: Game, action: Union[Action, dict]) -> Game:
    """
    Route an action to the engine's _apply_<type> handler.

    Actions the engine has no handler for leave the game unchanged.
    """
    action = coerce_action(action)
    handler = getattr(engine, f"_apply_{action.type}", None)
    if handler is None:
        return ignore(game, f"{action.type} is not supported by {game.type.value}")
    return handler(game, action)


def undo_last(engine: Any, game: Game) -> Game:
    """Route undo to the engine's _undo_<shot_type> handler for the last shot."""
    shot = game.last_shot
    if shot is None:
        return game
    handler = getattr(engine, f"_undo_{shot.shot_type.value}", None)
    if handler is None:
        logger.warning(
            f"Cannot undo {shot.shot_type.value} in a {game.type.value} game; dropping it",
            extra={"game_id": game.id},
        )
        return pop_shot(game)
    return handler(pop_shot(game), shot)


def ignore(game: Game, reason: str) -> Game:
    """Log an ignored action and return the game unchanged."""
    logger.warning(f"Ignoring action: {reason}", extra={"game_id": game.id})
    return game


# =============================================================================
# Turn bookkeeping
# =============================================================================

def with_active(players: Iterable[Player], index: int) -> tuple[Player, ...]:
    """Players with only the one at index marked active."""
    return tuple(
        p if p.is_active == (i == index) else replace(p, is_active=i == index)
        for i, p in enumerate(players)
    )


def switch_player(game: Game) -> Game:
    """Pass the turn to the next player in order."""
    if len(game.players) < 2:
        return game
    next_index = (game.current_player_index + 1) % len(game.players)
    return replace(
        game,
        players=with_active(game.players, next_index),
        current_player_index=next_index,
    )


def select_player(game: Game, index: int) -> Game:
    """Give the turn to the player at index."""
    if not 0 <= index < len(game.players):
        return ignore(game, f"no player at index {index}")
    return replace(
        game,
        players=with_active(game.players, index),
        current_player_index=index,
    )


def resolve_player_index(game: Game, player_id: Optional[str]) -> Optional[int]:
    """Index of player_id, or the current player when player_id is None."""
    if player_id is None:
        return game.current_player_index
    return game.player_index(player_id)


def update_player(game: Game, index: int, **changes) -> tuple[Player, ...]:
    players = list(game.players)
    players[index] = replace(players[index], **changes)
    return tuple(players)


# =============================================================================
# Shot log
# =============================================================================

def append_shot(game: Game, shot: Shot, **changes) -> Game:
    """Return game with shot appended to the history and changes applied."""
    return replace(game, shot_history=game.shot_history + (shot,), **changes)


def pop_shot(game: Game) -> Game:
    return replace(game, shot_history=game.shot_history[:-1])


def pop_score_entry(game: Game) -> Game:
    if not game.score_history:
        return game
    return replace(game, score_history=game.score_history[:-1])


def snapshot_players(game: Game) -> tuple[PlayerSnapshot, ...]:
    return tuple(PlayerSnapshot.of(p) for p in game.players)


def restore_players(
    players: Iterable[Player],
    snapshots: Iterable[PlayerSnapshot],
) -> tuple[Player, ...]:
    """Put each player's rack state back from the matching snapshot."""
    by_id = {s.id: s for s in snapshots}
    restored = []
    for player in players:
        snap = by_id.get(player.id)
        if snap is None:
            restored.append(player)
            continue
        restored.append(replace(
            player,
            balls_pocketed=snap.balls_pocketed,
            score=snap.score,
            sets_won=snap.sets_won,
        ))
    return tuple(restored)


def remove_last_ball(balls: tuple[int, ...], ball_number: int) -> tuple[int, ...]:
    """Drop the most recent occurrence of ball_number."""
    for i in range(len(balls) - 1, -1, -1):
        if balls[i] == ball_number:
            return balls[:i] + balls[i + 1:]
    return balls


def all_pocketed(game: Game) -> set[int]:
    return {ball for p in game.players for ball in p.balls_pocketed}
