"""
Test suite for Rotation rules.

Verifies:
- Balls are worth their number
- Reaching target_score ends the game
- Rack resets keep scores and advance the rack counters

Run with: pytest test_rotation.py -v
"""

import pytest

from constants import ROTATION_BALLS
from engines.rotation import RotationEngine
from game_utils import all_balls_pocketed, remaining_score
from models.actions import PocketBall, ResetRack, SwitchPlayer


@pytest.fixture
def engine():
    return RotationEngine()


@pytest.fixture
def game(engine):
    return engine.initialize([
        {"name": "Alice", "target_score": 120},
        {"name": "Bob", "target_score": 60},
    ])


def pocket_all(engine, game, balls):
    for ball in balls:
        game = engine.apply_action(game, PocketBall(ball_number=ball))
    return game


class TestRotationScoring:
    """Points equal the ball number."""

    def test_ball_value_is_number(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=15))
        assert game.players[0].score == 15

    def test_score_entry_per_pocket(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=7))
        entry = game.score_history[-1]
        assert entry.player_id == "player-1"
        assert entry.score == 7
        assert entry.ball_number == 7

    def test_duplicate_ball_is_noop(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=7))
        assert engine.apply_action(game, PocketBall(ball_number=7)) is game

    def test_full_rack_is_120(self, engine, game):
        game = pocket_all(engine, game, ROTATION_BALLS)
        assert game.players[0].score == 120
        assert all_balls_pocketed(game)

    def test_pocket_for_named_player(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=3, player_id="player-2"))
        assert game.players[1].score == 3
        assert game.players[0].score == 0

    def test_pocket_for_unknown_player_is_noop(self, engine, game):
        assert engine.apply_action(game, PocketBall(ball_number=3, player_id="nobody")) is game


class TestRotationVictory:
    """Reaching the player-specific target ends the game."""

    def test_reaching_target_wins(self, engine, game):
        game = pocket_all(engine, game, ROTATION_BALLS)
        result = engine.check_victory(game)
        assert result.is_game_over
        assert result.winner_id == "player-1"

    def test_below_target_keeps_playing(self, engine, game):
        game = pocket_all(engine, game, range(1, 15))
        assert game.players[0].score == 105
        assert not engine.check_victory(game).is_game_over

    def test_handicap_target(self, engine, game):
        game = engine.apply_action(game, SwitchPlayer())
        game = pocket_all(engine, game, [15, 14, 13, 12, 6])
        assert game.players[1].score == 60
        assert engine.check_victory(game).winner_id == "player-2"

    def test_remaining_score(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=10))
        assert remaining_score(game.players[0]) == 110


class TestRotationRackReset:
    """Re-racking keeps scores and advances counters."""

    def test_reset_rack(self, engine, game):
        game = pocket_all(engine, game, [1, 2, 3])
        game = engine.apply_action(game, ResetRack())
        assert game.players[0].score == 6
        assert game.players[0].balls_pocketed == ()
        assert game.current_rack == 2
        assert game.total_racks == 2

    def test_balls_available_after_reset(self, engine, game):
        game = pocket_all(engine, game, [1])
        game = engine.apply_action(game, ResetRack())
        game = engine.apply_action(game, PocketBall(ball_number=1))
        assert game.players[0].score == 2

    def test_undo_reset_restores_rack(self, engine, game):
        game = pocket_all(engine, game, [1, 2, 3])
        assert engine.undo(engine.apply_action(game, ResetRack(auto=True))) == game

    def test_undo_pocket_removes_score_entry(self, engine, game):
        game = pocket_all(engine, game, [4])
        after = engine.apply_action(game, PocketBall(ball_number=9))
        assert engine.undo(after) == game
