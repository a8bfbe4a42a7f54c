"""
Bowlard engine: a single player bowling ten frames with billiard balls.
"""

import logging
from dataclasses import replace
from typing import Optional, Union

from engines import bowling, common
from models.actions import Action, AddPins
from models.events import BowlingRollShot
from models.game_state import Game, GameType, VictoryResult
from models.player import Player


logger = logging.getLogger(__name__)


class BowlardEngine:
    """Rules for Bowlard games."""

    game_type = GameType.BOWLARD
    ball_numbers: tuple[int, ...] = ()

    def initialize(self, player_setups: list[dict], settings: Optional[dict] = None) -> Game:
        setup = player_setups[0] if player_setups else {}
        player = Player(
            id="player-1",
            name=setup.get("name") or "Player 1",
            is_active=True,
            bowling_frames=bowling.initialize_frames(),
        )
        return common.initial_game(self.game_type, (player,))

    def apply_action(self, game: Game, action: Union[Action, dict]) -> Game:
        return common.dispatch(self, game, action)

    def undo(self, game: Game) -> Game:
        return common.undo_last(self, game)

    def check_victory(self, game: Game) -> VictoryResult:
        frames = game.players[0].bowling_frames if game.players else None
        if frames and frames[-1].is_complete:
            return VictoryResult(is_game_over=True)
        return VictoryResult(is_game_over=False)

    def _apply_add_pins(self, game: Game, action: AddPins) -> Game:
        player = game.players[0]
        frames = player.bowling_frames or bowling.initialize_frames()
        index = bowling.current_frame_index(frames)
        if index < 0:
            return common.ignore(game, "all frames are complete")

        new_frames = bowling.add_roll(frames, action.pins)
        pins = new_frames[index].rolls[-1]
        if pins != action.pins:
            logger.warning(
                f"Clamped roll of {action.pins} pins to {pins}",
                extra={"game_id": game.id},
            )
        shot = BowlingRollShot(
            player_id=player.id,
            frame_number=index + 1,
            pins=pins,
            previous_frames=frames,
            previous_score=player.score,
        )
        return common.append_shot(
            game,
            shot,
            players=common.update_player(
                game,
                0,
                bowling_frames=new_frames,
                score=bowling.total_score(new_frames),
            ),
        )

    def _undo_bowling_roll(self, game: Game, shot: BowlingRollShot) -> Game:
        return replace(game, players=common.update_player(
            game,
            0,
            bowling_frames=shot.previous_frames,
            score=shot.previous_score,
        ))
