"""
Set Match engine.

Nine-ball sets: the 9-ball is worth 10 points, every other ball 1 point. A set
is awarded explicitly with win_set; the first player to reach their own
target_sets wins the match.
"""

import logging
from dataclasses import replace
from typing import Optional, Union

from constants import SET_MATCH_BALLS, get_ball_score
from engines import common
from models.actions import Action, PocketBall, ResetRack, SelectPlayer, SwitchPlayer, WinSet
from models.events import PocketShot, RackResetShot, SetWonShot
from models.game_state import Game, GameType, ScoreEntry, VictoryResult


logger = logging.getLogger(__name__)


class SetMatchEngine:
    """Rules for Set Match games."""

    game_type = GameType.SET_MATCH
    ball_numbers = SET_MATCH_BALLS

    def initialize(self, player_setups: list[dict], settings: Optional[dict] = None) -> Game:
        return common.initial_game(self.game_type, common.initialize_players(player_setups))

    def apply_action(self, game: Game, action: Union[Action, dict]) -> Game:
        return common.dispatch(self, game, action)

    def undo(self, game: Game) -> Game:
        return common.undo_last(self, game)

    def check_victory(self, game: Game) -> VictoryResult:
        for player in game.players:
            if player.target_sets and player.sets_won >= player.target_sets:
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
        if ball not in self.ball_numbers:
            return common.ignore(game, f"ball {ball} is not in a Set Match rack")
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
        )

    def _apply_win_set(self, game: Game, action: WinSet) -> Game:
        if game.get_player(action.player_id) is None:
            return common.ignore(game, f"unknown player {action.player_id}")

        players = tuple(
            replace(p, sets_won=p.sets_won + 1, score=1, balls_pocketed=())
            if p.id == action.player_id
            else replace(p, score=0, balls_pocketed=())
            for p in game.players
        )
        shot = SetWonShot(
            player_id=action.player_id,
            previous_players=common.snapshot_players(game),
            previous_rack=game.current_rack,
        )
        logger.debug(
            f"Set {game.current_rack} won by {action.player_id}",
            extra={"game_id": game.id, "rack": game.current_rack},
        )
        return common.append_shot(
            game,
            shot,
            players=players,
            current_rack=game.current_rack + 1,
            score_history=game.score_history + (
                ScoreEntry(player_id=action.player_id, score=1),
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
        players = tuple(replace(p, score=0, balls_pocketed=()) for p in game.players)
        return common.append_shot(game, shot, players=players)

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

    def _undo_set_won(self, game: Game, shot: SetWonShot) -> Game:
        game = replace(
            game,
            players=common.restore_players(game.players, shot.previous_players),
            current_rack=shot.previous_rack,
        )
        return common.pop_score_entry(game)

    def _undo_rack_reset(self, game: Game, shot: RackResetShot) -> Game:
        return replace(
            game,
            players=common.restore_players(game.players, shot.previous_players),
            current_rack=shot.previous_rack,
            total_racks=shot.previous_total_racks,
        )
