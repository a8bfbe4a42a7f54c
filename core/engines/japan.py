"""
Japan engine.

Players click balls during a rack (1 point each). A rack multiplier scales the
whole rack, deductions take points back, and completing the rack settles it
with zero-sum redistribution (see japan_calculator). The game has no automatic
winner; it ends when the players end it.

Rack lifecycle:
    accumulating -> (multiplier set) -> rack complete -> next rack

Rack completion is a single shot in the history that remembers the rack it
closed, the multiplier and every player's rack state, so undo can step back
across any number of racks one shot at a time.
"""

import logging
import random
from dataclasses import replace
from typing import Optional, Union

from constants import (
    BALLS_PER_INFERRED_HANDICAP,
    HANDICAP_BALL_POINTS,
    HANDICAP_BONUS_ALL_BALLS,
    JAPAN_BALL_POINTS,
    JAPAN_BALLS,
    clamp_multiplier,
)
from engines import common, japan_calculator, player_order
from models.actions import (
    Action,
    Deduction,
    EndGame,
    MultiplyAll,
    NextRack,
    PlayerOrderChange,
    PocketBall,
    RackComplete,
    SelectPlayer,
    SetMultiplier,
    SwitchPlayer,
)
from models.events import (
    BallClickShot,
    DeductionShot,
    GameCompleteShot,
    MultiplierAllShot,
    MultiplierShot,
    PlayerOrderChangeShot,
    RackCompleteShot,
)
from models.game_state import Game, GameType, VictoryResult
from models.japan import JapanPlayerOrder, JapanRackResult, JapanSettings


logger = logging.getLogger(__name__)


def legacy_rack_score(ball_count: int, handicap_balls: tuple[int, ...]) -> int:
    """
    Score a rack from a raw ball count.

    The count does not say which balls were pocketed, so handicap balls are
    inferred: running all ten balls earns every handicap bonus, otherwise one
    handicap ball is assumed per five balls (capped at the handicap count).
    """
    if ball_count == len(JAPAN_BALLS):
        return len(JAPAN_BALLS) + len(handicap_balls) * HANDICAP_BONUS_ALL_BALLS
    likely_handicap = 0
    if ball_count >= BALLS_PER_INFERRED_HANDICAP:
        likely_handicap = min(ball_count // BALLS_PER_INFERRED_HANDICAP, len(handicap_balls))
    regular = ball_count - likely_handicap
    return max(0, regular + likely_handicap * HANDICAP_BALL_POINTS)


class JapanEngine:
    """Rules for Japan games."""

    game_type = GameType.JAPAN
    ball_numbers = JAPAN_BALLS

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source for 4+ player order shuffles.
        """
        self._rng = rng or random.Random()

    def initialize(
        self,
        player_setups: list[dict],
        settings: Optional[Union[JapanSettings, dict]] = None,
    ) -> Game:
        if isinstance(settings, dict):
            settings = JapanSettings.from_dict(settings)
        settings = settings or JapanSettings()
        players = common.initialize_players(player_setups)
        return common.initial_game(
            self.game_type,
            players,
            japan_settings=settings,
            japan_current_multiplier=1,
            japan_player_order_history=(
                JapanPlayerOrder(
                    from_rack=1,
                    to_rack=settings.order_change_interval,
                    player_order=tuple(p.id for p in players),
                ),
            ),
        )

    def apply_action(self, game: Game, action: Union[Action, dict]) -> Game:
        return common.dispatch(self, game, action)

    def undo(self, game: Game) -> Game:
        return common.undo_last(self, game)

    def check_victory(self, game: Game) -> VictoryResult:
        return VictoryResult(is_game_over=False)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @staticmethod
    def settings(game: Game) -> JapanSettings:
        return game.japan_settings or JapanSettings()

    def should_change_order(self, game: Game) -> bool:
        """Whether the rack just played closes an order-change period."""
        settings = self.settings(game)
        if len(game.players) <= 2 or not settings.order_change_enabled:
            return False
        return game.current_rack > 0 and game.current_rack % settings.order_change_interval == 0

    def current_rack_results(self, game: Game) -> JapanRackResult:
        return japan_calculator.calculate_current_rack_results(game)

    def player_order_for_racks(self, game: Game, start_rack: int, end_rack: int) -> tuple[str, ...]:
        return player_order.player_order_for_racks(game, start_rack, end_rack)

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
            return common.ignore(game, f"ball {ball} is not in a Japan rack")
        index = common.resolve_player_index(game, action.player_id)
        if index is None:
            return common.ignore(game, f"unknown player {action.player_id}")

        player = game.players[index]
        shot = BallClickShot(
            player_id=player.id,
            ball_number=ball,
            is_sunk=True,
            points=JAPAN_BALL_POINTS,
            previous_score=player.score,
        )
        return common.append_shot(
            game,
            shot,
            players=common.update_player(
                game,
                index,
                score=player.score + JAPAN_BALL_POINTS,
                balls_pocketed=player.balls_pocketed + (ball,),
            ),
        )

    def _apply_set_multiplier(self, game: Game, action: SetMultiplier) -> Game:
        value = clamp_multiplier(action.value)
        if value != action.value:
            logger.warning(
                f"Clamped multiplier {action.value} to {value}",
                extra={"game_id": game.id},
            )
        shot = MultiplierShot(
            player_id=game.players[game.current_player_index].id,
            value=value,
            label=action.label or f"x{value}",
            previous_multiplier=game.japan_current_multiplier,
        )
        return common.append_shot(game, shot, japan_current_multiplier=value)

    def _apply_multiply_all(self, game: Game, action: MultiplyAll) -> Game:
        value = clamp_multiplier(game.japan_current_multiplier * action.factor)
        shot = MultiplierAllShot(
            player_id=game.players[game.current_player_index].id,
            factor=action.factor,
            value=value,
            previous_multiplier=game.japan_current_multiplier,
        )
        return common.append_shot(game, shot, japan_current_multiplier=value)

    def _apply_deduction(self, game: Game, action: Deduction) -> Game:
        if not self.settings(game).deduction_enabled:
            return common.ignore(game, "deductions are disabled for this game")
        index = common.resolve_player_index(game, action.player_id)
        if index is None:
            return common.ignore(game, f"unknown player {action.player_id}")

        player = game.players[index]
        shot = DeductionShot(
            player_id=player.id,
            is_foul=True,
            value=action.value,
            label=action.label or f"-{action.value}",
            previous_score=player.score,
        )
        return common.append_shot(
            game,
            shot,
            players=common.update_player(game, index, score=player.score - action.value),
        )

    def _apply_next_rack(self, game: Game, action: NextRack) -> Game:
        result = japan_calculator.calculate_current_rack_results(game)
        shot = RackCompleteShot(
            player_id=game.players[game.current_player_index].id,
            previous_rack=game.current_rack,
            previous_multiplier=game.japan_current_multiplier,
            previous_players=common.snapshot_players(game),
            rack_result=result,
        )
        logger.debug(
            f"Rack {game.current_rack} settled: "
            + ", ".join(f"{r.player_id}={r.delta_points:+d}" for r in result.player_results),
            extra={"game_id": game.id, "rack": game.current_rack},
        )
        return common.append_shot(
            game,
            shot,
            players=tuple(replace(p, balls_pocketed=(), score=0) for p in game.players),
            current_rack=game.current_rack + 1,
            japan_rack_history=game.japan_rack_history + (result,),
            japan_current_multiplier=1,
        )

    def _apply_rack_complete(self, game: Game, action: RackComplete) -> Game:
        handicap = self.settings(game).handicap_balls
        counts = (action.player1_balls, action.player2_balls)
        players = tuple(
            replace(p, score=p.score + legacy_rack_score(counts[i], handicap))
            if i < len(counts) else p
            for i, p in enumerate(game.players)
        )
        shot = RackCompleteShot(
            player_id=game.players[0].id,
            ball_number=action.player1_balls,
            is_sunk=True,
            previous_rack=game.current_rack,
            previous_multiplier=game.japan_current_multiplier,
            previous_players=common.snapshot_players(game),
            player1_balls=action.player1_balls,
            player2_balls=action.player2_balls,
        )
        return common.append_shot(
            game,
            shot,
            players=players,
            current_rack=game.current_rack + 1,
        )

    def _apply_player_order_change(self, game: Game, action: PlayerOrderChange) -> Game:
        if game.get_player(action.selected_player_id) is None:
            return common.ignore(game, f"unknown player {action.selected_player_id}")
        if len(game.players) <= 2:
            logger.debug("Order change skipped for a two-player game", extra={"game_id": game.id})
            return game

        previous_order = tuple(p.id for p in game.players)
        new_order = player_order.calculate_new_order(
            previous_order, action.selected_player_id, self._rng
        )
        by_id = {p.id: p for p in game.players}
        interval = self.settings(game).order_change_interval
        from_rack = game.current_rack + 1

        shot = PlayerOrderChangeShot(
            player_id=action.selected_player_id,
            previous_order=previous_order,
            previous_player_index=game.current_player_index,
            new_order=new_order,
        )
        logger.info(
            f"Player order changed to {' -> '.join(new_order)} from rack {from_rack}",
            extra={"game_id": game.id, "rack": game.current_rack},
        )
        return common.append_shot(
            game,
            shot,
            players=common.with_active((by_id[pid] for pid in new_order), 0),
            current_player_index=0,
            japan_player_order_history=game.japan_player_order_history + (
                JapanPlayerOrder(
                    from_rack=from_rack,
                    to_rack=from_rack + interval - 1,
                    player_order=new_order,
                ),
            ),
        )

    def _apply_end_game(self, game: Game, action: EndGame) -> Game:
        if not japan_calculator.has_current_rack_clicks(game):
            logger.debug("No balls in the current rack, nothing to settle", extra={"game_id": game.id})
            return game

        result = japan_calculator.calculate_current_rack_results(game)
        shot = GameCompleteShot(
            player_id=game.players[game.current_player_index].id,
            final_rack=game.current_rack,
            final_multiplier=game.japan_current_multiplier,
            rack_result=result,
        )
        return common.append_shot(
            game,
            shot,
            japan_rack_history=game.japan_rack_history + (result,),
        )

    # -------------------------------------------------------------------------
    # Undo
    # -------------------------------------------------------------------------

    def _undo_ball_click(self, game: Game, shot: BallClickShot) -> Game:
        index = game.player_index(shot.player_id)
        if index is None:
            return game
        player = game.players[index]
        return replace(game, players=common.update_player(
            game,
            index,
            score=shot.previous_score,
            balls_pocketed=common.remove_last_ball(player.balls_pocketed, shot.ball_number),
        ))

    def _undo_multiplier(self, game: Game, shot: MultiplierShot) -> Game:
        return replace(game, japan_current_multiplier=shot.previous_multiplier)

    def _undo_multiplier_all(self, game: Game, shot: MultiplierAllShot) -> Game:
        return replace(game, japan_current_multiplier=shot.previous_multiplier)

    def _undo_deduction(self, game: Game, shot: DeductionShot) -> Game:
        index = game.player_index(shot.player_id)
        if index is None:
            return game
        return replace(game, players=common.update_player(game, index, score=shot.previous_score))

    def _undo_rack_complete(self, game: Game, shot: RackCompleteShot) -> Game:
        rack_history = game.japan_rack_history
        if shot.rack_result is not None and rack_history:
            rack_history = rack_history[:-1]
        logger.debug(
            f"Undoing completion of rack {shot.previous_rack}",
            extra={"game_id": game.id, "rack": shot.previous_rack},
        )
        return replace(
            game,
            players=common.restore_players(game.players, shot.previous_players),
            current_rack=shot.previous_rack,
            japan_current_multiplier=shot.previous_multiplier,
            japan_rack_history=rack_history,
        )

    def _undo_player_order_change(self, game: Game, shot: PlayerOrderChangeShot) -> Game:
        by_id = {p.id: p for p in game.players}
        if set(by_id) != set(shot.previous_order):
            return game
        return replace(
            game,
            players=common.with_active(
                (by_id[pid] for pid in shot.previous_order), shot.previous_player_index
            ),
            current_player_index=shot.previous_player_index,
            japan_player_order_history=game.japan_player_order_history[:-1],
        )

    def _undo_game_complete(self, game: Game, shot: GameCompleteShot) -> Game:
        if not game.japan_rack_history:
            return game
        return replace(game, japan_rack_history=game.japan_rack_history[:-1])
