"""
Test suite for Bowlard frame scoring.

Run with: pytest test_bowlard.py -v
"""

import pytest

from engines import bowling
from engines.bowlard import BowlardEngine
from models.actions import AddPins, PocketBall


@pytest.fixture
def engine():
    return BowlardEngine()


@pytest.fixture
def game(engine):
    return engine.initialize([{"name": "Solo"}])


def roll_all(engine, game, rolls):
    for pins in rolls:
        game = engine.apply_action(game, AddPins(pins=pins))
    return game


class TestFrameScoring:
    """Standard ten-pin scoring rules."""

    def test_open_frame(self, engine, game):
        game = roll_all(engine, game, [3, 4])
        frame = game.players[0].bowling_frames[0]
        assert frame.is_complete
        assert frame.score == 7
        assert game.players[0].score == 7

    def test_spare_bonus(self, engine, game):
        game = roll_all(engine, game, [7, 3, 4, 2])
        frames = game.players[0].bowling_frames
        assert frames[0].is_spare
        assert frames[0].score == 14
        assert frames[1].score == 20
        assert game.players[0].score == 20

    def test_strike_bonus(self, engine, game):
        game = roll_all(engine, game, [10, 3, 4])
        frames = game.players[0].bowling_frames
        assert frames[0].is_strike
        assert frames[0].score == 17
        assert frames[1].score == 24

    def test_double_strike(self, engine, game):
        game = roll_all(engine, game, [10, 10, 4, 2])
        frames = game.players[0].bowling_frames
        assert frames[0].score == 24
        assert frames[1].score == 40
        assert frames[2].score == 46

    def test_frames_without_rolls_have_no_score(self, engine, game):
        game = roll_all(engine, game, [3, 4])
        assert game.players[0].bowling_frames[1].score is None

    def test_score_is_last_cumulative_frame(self, engine, game):
        game = roll_all(engine, game, [1, 1, 1, 1, 1, 1])
        assert game.players[0].score == 6

    def test_perfect_game(self, engine, game):
        game = roll_all(engine, game, [10] * 12)
        assert game.players[0].score == 300
        assert engine.check_victory(game).is_game_over

    def test_all_gutter(self, engine, game):
        game = roll_all(engine, game, [0] * 20)
        assert game.players[0].score == 0
        assert engine.check_victory(game).is_game_over


class TestPinClamping:
    """Rolls can't knock down more pins than are standing."""

    def test_second_roll_clamped(self, engine, game):
        game = roll_all(engine, game, [6, 9])
        assert game.players[0].bowling_frames[0].rolls == (6, 4)
        assert game.players[0].bowling_frames[0].is_spare

    def test_first_roll_clamped(self, engine, game):
        game = roll_all(engine, game, [15])
        assert game.players[0].bowling_frames[0].rolls == (10,)

    def test_tenth_frame_rerack_after_strike(self, engine, game):
        game = roll_all(engine, game, [0] * 18 + [10, 10, 10])
        tenth = game.players[0].bowling_frames[9]
        assert tenth.rolls == (10, 10, 10)
        assert tenth.score == 30

    def test_tenth_frame_fill_ball_after_strike_then_open(self, engine, game):
        game = roll_all(engine, game, [0] * 18 + [10, 3, 9])
        assert game.players[0].bowling_frames[9].rolls == (10, 3, 7)


class TestTenthFrame:
    """Frame 10 completion rules."""

    def test_open_tenth_completes_after_two(self, engine, game):
        game = roll_all(engine, game, [0] * 18 + [3, 4])
        assert engine.check_victory(game).is_game_over
        assert engine.check_victory(game).winner_id is None

    def test_spare_in_tenth_gets_third_roll(self, engine, game):
        game = roll_all(engine, game, [0] * 18 + [6, 4])
        assert not engine.check_victory(game).is_game_over
        game = roll_all(engine, game, [5])
        assert engine.check_victory(game).is_game_over
        assert game.players[0].score == 15

    def test_roll_after_game_is_noop(self, engine, game):
        game = roll_all(engine, game, [0] * 20)
        assert engine.apply_action(game, AddPins(pins=5)) is game


class TestBowlardUndo:
    """Undo restores the frames exactly."""

    def test_undo_inverts_roll(self, engine, game):
        game = roll_all(engine, game, [10, 3])
        assert engine.undo(engine.apply_action(game, AddPins(pins=7))) == game

    def test_undo_to_start(self, engine, game):
        start = game
        game = roll_all(engine, game, [10, 3, 7, 5])
        for _ in range(4):
            game = engine.undo(game)
        assert game == start

    def test_pocket_ball_not_supported(self, engine, game):
        assert engine.apply_action(game, PocketBall(ball_number=1)) is game


class TestBowlingHelpers:
    """Module-level frame helpers."""

    def test_initialize_frames(self):
        frames = bowling.initialize_frames()
        assert [f.frame_number for f in frames] == list(range(1, 11))
        assert bowling.current_frame_index(frames) == 0

    def test_total_score_empty(self):
        assert bowling.total_score(bowling.initialize_frames()) == 0
