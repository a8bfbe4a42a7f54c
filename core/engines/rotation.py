"""
Rotation engine.

Fifteen balls, each worth its number, so a full rack is 120 points. Scores
carry across racks; the first player to reach their own target_score wins.
"""

import logging
from dataclasses import replace
from typing import Optional, Union

from constants import ROTATION_BALLS, get_ball_score
from engines import common
from models.actions import Action, PocketBall, ResetRack, SelectPlayer, SwitchPlayer
from models.events import PocketShot, RackResetShot
from models.game_state import Game, GameType, ScoreEntry, VictoryResult


logger = logging.getLogger(__name__)


class RotationEngine:
    """Rules for Rotation games."""

    game_type = GameType.ROTATION
    ball_numbers = ROTATION_BALLS

    def initialize(self, player_setups: list[dict], settings: Optional[dict] = None) -> Game:
        return common.initial_game(self.game_type, common.initialize_players(player_setups))

    def apply_action(self, game: Game, action: Union[Action, dict]) -> Game:
        return common.dispatch(self, game, action)

    def undo(self, game: Game) -> Game:
        return common.undo_last(self, game)

    def check_victory(self, game: Game) -> VictoryResult:
        for player in game.players:
            if player.target_score and player.score >= player.target_score:
                return VictoryResult(is_game_over=True, winner_id=player.id)
        return VictoryResult(is_game_over=False)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _apply_switch_player(self, game: Game, action: SwitchPlayer) -> Game:
        return common.switch_player(game)

    def _apply_select_player(self, game: Game, action: SelectPlayer) -> Game:
        return common.select_player(game, action.player_index)

    def _apply_pocket_ball(self, game: Game, action: PocketBall) -> Game:
        ball = action.ball_number
        if ball in common.all_pocketed(game):
            return common.ignore(game, f"ball {ball} already pocketed this rack")
        index = common.resolve_player_index(game, action.player_id)
        if index is None:
            return common.ignore(game, f"unknown player {action.player_id}")

        player = game.players[index]
        points = get_ball_score(ball, self.game_type.value)
        shot = PocketShot(
            player_id=player.id,
            ball_number=ball,
            is_sunk=True,
            points=points,
            previous_score=player.score,
            score_entry_added=True,
        )
        return common.append_shot(
            game,
            shot,
            players=common.update_player(
                game,
                index,
                score=player.score + points,
                balls_pocketed=player.balls_pocketed + (ball,),
            ),
            score_history=game.score_history + (
                ScoreEntry(player_id=player.id, score=points, ball_number=ball),
            ),
        )

    def _apply_reset_rack(self, game: Game, action: ResetRack) -> Game:
        shot = RackResetShot(
            player_id=game.players[game.current_player_index].id,
            previous_players=common.snapshot_players(game),
            previous_rack=game.current_rack,
            previous_total_racks=game.total_racks,
            auto=action.auto,
        )
        logger.debug(
            f"Rack {game.current_rack} reset (auto={action.auto})",
            extra={"game_id": game.id, "rack": game.current_rack},
        )
        return common.append_shot(
            game,
            shot,
            players=tuple(replace(p, balls_pocketed=()) for p in game.players),
            current_rack=game.current_rack + 1,
            total_racks=game.total_racks + 1,
        )

    # -------------------------------------------------------------------------
    # Undo
    # -------------------------------------------------------------------------

    def _undo_pocket(self, game: Game, shot: PocketShot) -> Game:
        index = game.player_index(shot.player_id)
        if index is None:
            return game
        player = game.players[index]
        game = replace(game, players=common.update_player(
            game,
            index,
            score=shot.previous_score,
            balls_pocketed=common.remove_last_ball(player.balls_pocketed, shot.ball_number),
        ))
        return common.pop_score_entry(game) if shot.score_entry_added else game

    def _undo_rack_reset(self, game: Game, shot: RackResetShot) -> Game:
        return replace(
            game,
            players=common.restore_players(game.players, shot.previous_players),
            current_rack=shot.previous_rack,
            total_racks=shot.previous_total_racks,
        )
