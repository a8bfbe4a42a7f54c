"""
Tests for game and action serialization.

These tests cover:
- Game.to_json/from_json keeps everything needed to resume and undo
- Shot.from_dict picks the right shot type
- parse_action validation errors
"""

import json

import pytest

from engines.factory import EngineFactory
from models.actions import (
    AddPins,
    InvalidActionError,
    MultiplyAll,
    NextRack,
    PlayerOrderChange,
    PocketBall,
    RackComplete,
    SetMultiplier,
    WinSet,
    parse_action,
)
from models.clock import ChessClockSettings, ChessClockState, PlayerClockState
from models.events import (
    BallClickShot,
    BowlingRollShot,
    RackCompleteShot,
    SetWonShot,
    Shot,
    ShotType,
)
from models.game_state import Game, GameType
from models.japan import JapanSettings


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def factory():
    return EngineFactory()


def played(factory, game_type, actions, setups=None, settings=None):
    engine = factory.get_engine(game_type)
    game = engine.initialize(setups or [{"name": "A"}, {"name": "B"}, {"name": "C"}], settings)
    for action in actions:
        game = engine.apply_action(game, action)
    return engine, game


# =============================================================================
# Game round trips
# =============================================================================

class TestGameSerialization:
    """Serialized games resume exactly."""

    def test_set_match(self, factory):
        _, game = played(factory, GameType.SET_MATCH, [
            PocketBall(ball_number=9),
            WinSet(player_id="player-2"),
        ])
        restored = Game.from_json(game.to_json())
        assert restored == game
        assert isinstance(restored.shot_history[-1], SetWonShot)

    def test_bowlard(self, factory):
        _, game = played(
            factory,
            GameType.BOWLARD,
            [AddPins(pins=10), AddPins(pins=4)],
            setups=[{"name": "Solo"}],
        )
        restored = Game.from_dict(json.loads(json.dumps(game.to_dict())))
        assert restored == game
        assert isinstance(restored.shot_history[-1], BowlingRollShot)

    def test_japan_with_racks_and_order(self, factory):
        _, game = played(
            factory,
            GameType.JAPAN,
            [
                PocketBall(ball_number=1),
                SetMultiplier(value=2),
                MultiplyAll(factor=1.5),
                NextRack(),
                PlayerOrderChange(selected_player_id="player-3"),
                RackComplete(player1_balls=5, player2_balls=2),
            ],
            settings=JapanSettings(order_change_enabled=True),
        )
        restored = Game.from_json(game.to_json())
        assert restored == game
        rack_shots = [s for s in restored.shot_history if isinstance(s, RackCompleteShot)]
        assert rack_shots[0].rack_result == game.japan_rack_history[0]
        assert rack_shots[1].rack_result is None
        assert rack_shots[1].player1_balls == 5

    def test_restored_game_undoes(self, factory):
        engine, game = played(factory, GameType.JAPAN, [
            PocketBall(ball_number=4),
            NextRack(),
        ])
        restored = Game.from_json(game.to_json())
        assert engine.undo(restored) == engine.undo(game)

    def test_clock_fields(self, factory):
        engine = factory.get_engine(GameType.SET_MATCH)
        game = engine.initialize([{"name": "A"}, {"name": "B"}])
        state = ChessClockState(
            player_times=(PlayerClockState(remaining_time=12.5, is_warning=True), PlayerClockState(60)),
            is_running=True,
            last_tick_timestamp=1700000000.25,
            active_player_index=1,
        )
        game = Game.from_dict({
            **game.to_dict(),
            "chess_clock": ChessClockSettings(enabled=True, time_limit=1).to_dict(),
            "chess_clock_state": state.to_dict(),
        })
        restored = Game.from_json(game.to_json())
        assert restored.chess_clock_state == state
        assert restored.chess_clock.enabled


class TestShotSerialization:
    """Shot.from_dict dispatches on shot_type."""

    def test_ball_click(self):
        shot = BallClickShot(player_id="player-1", ball_number=3, is_sunk=True, previous_score=2)
        data = shot.to_dict()
        assert data["shot_type"] == "ball_click"
        assert Shot.from_dict(data) == shot
        assert Shot.from_json(shot.to_json()).shot_type == ShotType.BALL_CLICK

    def test_unknown_shot_type(self):
        with pytest.raises(ValueError):
            Shot.from_dict({"shot_type": "teleport"})


# =============================================================================
# Action parsing
# =============================================================================

class TestParseAction:
    """Raw payload validation."""

    def test_parses_by_type(self):
        action = parse_action({"type": "win_set", "player_id": "player-1"})
        assert action == WinSet(player_id="player-1")

    def test_defaults(self):
        action = parse_action({"type": "pocket_ball", "ball_number": 4})
        assert action.player_id is None

    @pytest.mark.parametrize("payload", [
        {"type": "pocket_ball"},
        {"type": "pocket_ball", "ball_number": 0},
        {"type": "pocket_ball", "ball_number": 16},
        {"type": "add_pins", "pins": -1},
        {"type": "multiply_all", "factor": 0},
        {"type": "win_set"},
        {"type": "next_rack", "extra": 1},
        {"type": "unknown"},
        {},
    ])
    def test_invalid_payloads(self, payload):
        with pytest.raises(InvalidActionError):
            parse_action(payload)

    def test_error_names_action(self):
        with pytest.raises(InvalidActionError, match="pocket_ball"):
            parse_action({"type": "pocket_ball", "ball_number": "nine"})

    def test_engine_accepts_raw_payload(self, factory):
        engine = factory.get_engine("SET_MATCH")
        game = engine.initialize([{"name": "A"}, {"name": "B"}])
        with pytest.raises(InvalidActionError):
            engine.apply_action(game, {"type": "win_set"})
