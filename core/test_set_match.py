"""
Test suite for Set Match rules.

Verifies:
- 9-ball worth 10 points, others 1
- Duplicate balls in a rack are ignored
- Winning a set resets the rack and counts toward target_sets
- Undo reverses each action exactly

Run with: pytest test_set_match.py -v
"""

import pytest

from engines.set_match import SetMatchEngine
from models.actions import PocketBall, ResetRack, SelectPlayer, SwitchPlayer, WinSet
from models.events import ShotType


@pytest.fixture
def engine():
    return SetMatchEngine()


@pytest.fixture
def game(engine):
    return engine.initialize([
        {"name": "Alice", "target_sets": 3},
        {"name": "Bob", "target_sets": 3},
    ])


# =============================================================================
# Initialization
# =============================================================================

class TestInitialize:
    """New games start from a clean slate."""

    def test_player_ids_and_active_player(self, game):
        assert [p.id for p in game.players] == ["player-1", "player-2"]
        assert game.players[0].is_active
        assert not game.players[1].is_active
        assert game.current_player_index == 0

    def test_scores_and_rack(self, game):
        assert all(p.score == 0 for p in game.players)
        assert game.current_rack == 1
        assert game.total_racks == 1
        assert game.shot_history == ()

    def test_one_zero_score_entry_per_player(self, game):
        assert [(e.player_id, e.score) for e in game.score_history] == [
            ("player-1", 0),
            ("player-2", 0),
        ]


# =============================================================================
# Pocketing
# =============================================================================

class TestPocketBall:
    """Ball scoring and the shot log."""

    def test_nine_ball_worth_ten(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=9))
        assert game.players[0].score == 10
        assert game.players[0].balls_pocketed == (9,)

    def test_other_balls_worth_one(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=3))
        assert game.players[0].score == 1

    def test_logs_pocket_shot(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=4))
        assert len(game.shot_history) == 1
        shot = game.shot_history[0]
        assert shot.shot_type == ShotType.POCKET
        assert shot.player_id == "player-1"
        assert shot.ball_number == 4
        assert shot.is_sunk

    def test_duplicate_ball_is_noop(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=4))
        game = engine.apply_action(game, SwitchPlayer())
        again = engine.apply_action(game, PocketBall(ball_number=4))
        assert again is game

    def test_ball_outside_rack_is_noop(self, engine, game):
        assert engine.apply_action(game, PocketBall(ball_number=12)) is game

    def test_does_not_mutate_input(self, engine, game):
        before = game.to_dict()
        engine.apply_action(game, PocketBall(ball_number=9))
        assert game.to_dict() == before

    def test_accepts_raw_dict(self, engine, game):
        game = engine.apply_action(game, {"type": "pocket_ball", "ball_number": 9})
        assert game.players[0].score == 10


# =============================================================================
# Turns
# =============================================================================

class TestTurns:
    """Switching turns never logs a shot."""

    def test_switch_player(self, engine, game):
        game = engine.apply_action(game, SwitchPlayer())
        assert game.current_player_index == 1
        assert [p.is_active for p in game.players] == [False, True]
        assert game.shot_history == ()

    def test_switch_wraps_around(self, engine, game):
        game = engine.apply_action(game, SwitchPlayer())
        game = engine.apply_action(game, SwitchPlayer())
        assert game.current_player_index == 0

    def test_select_player(self, engine, game):
        game = engine.apply_action(game, SelectPlayer(player_index=1))
        assert game.current_player_index == 1
        assert sum(p.is_active for p in game.players) == 1

    def test_select_unknown_index_is_noop(self, engine, game):
        assert engine.apply_action(game, SelectPlayer(player_index=5)) is game


# =============================================================================
# Sets
# =============================================================================

class TestWinSet:
    """Awarding sets and match victory."""

    def test_win_set_updates_players(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=2))
        game = engine.apply_action(game, WinSet(player_id="player-1"))
        alice, bob = game.players
        assert alice.sets_won == 1
        assert alice.score == 1
        assert bob.score == 0
        assert alice.balls_pocketed == ()
        assert game.current_rack == 2

    def test_win_set_appends_score_entry(self, engine, game):
        game = engine.apply_action(game, WinSet(player_id="player-2"))
        assert game.score_history[-1].player_id == "player-2"
        assert game.score_history[-1].score == 1

    def test_unknown_player_is_noop(self, engine, game):
        assert engine.apply_action(game, WinSet(player_id="player-9")) is game

    def test_three_sets_wins_match_and_undo_reopens(self, engine, game):
        for _ in range(3):
            game = engine.apply_action(game, WinSet(player_id="player-1"))

        result = engine.check_victory(game)
        assert result.is_game_over
        assert result.winner_id == "player-1"

        game = engine.undo(game)
        assert game.players[0].sets_won == 2
        assert not engine.check_victory(game).is_game_over

    def test_no_target_no_victory(self, engine):
        game = engine.initialize([{"name": "A"}, {"name": "B"}])
        for _ in range(5):
            game = engine.apply_action(game, WinSet(player_id="player-1"))
        assert not engine.check_victory(game).is_game_over


# =============================================================================
# Undo
# =============================================================================

class TestUndo:
    """undo(apply(game)) == game for every Set Match action."""

    @pytest.mark.parametrize("action", [
        PocketBall(ball_number=9),
        PocketBall(ball_number=1),
        WinSet(player_id="player-2"),
        ResetRack(),
    ])
    def test_undo_inverts_apply(self, engine, game, action):
        game = engine.apply_action(game, PocketBall(ball_number=5))
        assert engine.undo(engine.apply_action(game, action)) == game

    def test_empty_undo_is_noop(self, engine, game):
        assert engine.undo(game) == game

    def test_reset_rack_clears_scores(self, engine, game):
        game = engine.apply_action(game, PocketBall(ball_number=9))
        game = engine.apply_action(game, ResetRack())
        assert game.players[0].score == 0
        assert game.players[0].balls_pocketed == ()
        assert game.current_rack == 1
        assert game.shot_history[-1].shot_type == ShotType.RACK_RESET
