"""
Tests for game helpers and structured logging.
"""

import json
import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from engines.factory import EngineFactory
from game_utils import (
    all_balls_pocketed,
    format_duration,
    game_duration,
    is_game_in_progress,
    rematch_setups,
    remaining_score,
)
from logging_config import (
    ContextLogger,
    DevelopmentFormatter,
    JSONFormatter,
    game_id_var,
    get_logger,
)
from models.actions import PocketBall
from models.game_state import GameStatus, GameType


@pytest.fixture
def rotation_game():
    engine = EngineFactory().get_engine(GameType.ROTATION)
    return engine, engine.initialize([
        {"name": "A", "target_score": 70},
        {"name": "B", "target_score": 120},
    ])


# =============================================================================
# game_utils
# =============================================================================

class TestGameUtils:
    """Helpers around a Game value."""

    def test_in_progress_needs_activity(self, rotation_game):
        engine, game = rotation_game
        assert not is_game_in_progress(None)
        assert not is_game_in_progress(game)
        game = engine.apply_action(game, PocketBall(ball_number=1))
        assert is_game_in_progress(game)
        assert not is_game_in_progress(replace(game, status=GameStatus.COMPLETED))

    def test_remaining_score(self, rotation_game):
        engine, game = rotation_game
        game = engine.apply_action(game, PocketBall(ball_number=15))
        assert remaining_score(game.players[0]) == 55
        assert remaining_score(replace(game.players[0], target_score=None)) == 0

    def test_all_balls_pocketed_rotation_only(self, rotation_game):
        engine, game = rotation_game
        assert not all_balls_pocketed(game)
        for ball in range(1, 16):
            game = engine.apply_action(game, PocketBall(ball_number=ball))
        assert all_balls_pocketed(game)
        assert not all_balls_pocketed(replace(game, type=GameType.SET_MATCH))

    def test_rematch_setups(self, rotation_game):
        _, game = rotation_game
        assert rematch_setups(game) == [
            {"name": "A", "target_score": 70, "target_sets": None},
            {"name": "B", "target_score": 120, "target_sets": None},
        ]

    def test_duration(self, rotation_game):
        _, game = rotation_game
        start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        game = replace(game, start_time=start)
        assert game_duration(game, now=start + timedelta(minutes=5)) == timedelta(minutes=5)
        ended = replace(game, end_time=start + timedelta(hours=1, seconds=7))
        assert format_duration(game_duration(ended)) == "1:00:07"

    @pytest.mark.parametrize("seconds,expected", [(0, "0:00"), (65, "1:05"), (3600, "1:00:00")])
    def test_format_duration(self, seconds, expected):
        assert format_duration(timedelta(seconds=seconds)) == expected


# =============================================================================
# logging_config
# =============================================================================

def make_record(**extra):
    record = logging.LogRecord("engines.japan", logging.INFO, __file__, 1, "Rack settled", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogging:
    """Formatters and context propagation."""

    def test_json_formatter_includes_context(self):
        token = game_id_var.set("game-123")
        try:
            data = json.loads(JSONFormatter().format(make_record(rack=3, player_id="player-2")))
        finally:
            game_id_var.reset(token)
        assert data["message"] == "Rack settled"
        assert data["game_id"] == "game-123"
        assert data["rack"] == 3
        assert data["player_id"] == "player-2"

    def test_development_formatter(self):
        output = DevelopmentFormatter().format(make_record(game_id="abcdef123456", rack=2))
        assert "game=abcdef12" in output
        assert "rack=2" in output
        assert "Rack settled" in output

    def test_context_logger_merges_extra(self, caplog):
        logger = get_logger("scorekeeper.test")
        assert isinstance(logger, ContextLogger)
        with caplog.at_level(logging.INFO, logger="scorekeeper.test"):
            logger.with_context(game_id="g1").info("hello", extra={"rack": 4})
        record = caplog.records[-1]
        assert record.game_id == "g1"
        assert record.rack == 4
