"""
Ball and scoring constants for the supported rule sets.

This module is the single source of truth for ball numbers, point values and
rule limits. Values that can be tuned per deployment come from config.py.

Standard Scoring:
    - Set Match: 9-ball is worth 10 points, every other ball 1 point
    - Rotation: a ball is worth its number (1-15, a full rack sums to 120)
    - Japan: every ball click is worth 1 point before the rack multiplier
    - Bowlard: ten-pin bowling scoring over 10 frames
"""

from config import config


# =============================================================================
# Ball Sets
# =============================================================================

SET_MATCH_BALLS: tuple[int, ...] = tuple(range(1, 10))
ROTATION_BALLS: tuple[int, ...] = tuple(range(1, 16))
JAPAN_BALLS: tuple[int, ...] = tuple(range(1, 11))

SET_MATCH_MONEY_BALL = 9
SET_MATCH_MONEY_BALL_POINTS = 10
JAPAN_BALL_POINTS = 1


# =============================================================================
# Bowlard
# =============================================================================

BOWLING_FRAMES = 10
BOWLING_PINS = 10


# =============================================================================
# Japan
# =============================================================================

DEFAULT_HANDICAP_BALLS: tuple[int, ...] = tuple(config.japan_defaults.handicap_balls)
DEFAULT_ORDER_CHANGE_INTERVAL = config.japan_defaults.order_change_interval
DEFAULT_ORDER_CHANGE_ENABLED = config.japan_defaults.order_change_enabled
MULTIPLIER_MIN = config.japan_defaults.multiplier_min
MULTIPLIER_MAX = config.japan_defaults.multiplier_max
ORDER_SHUFFLE_ATTEMPTS = config.japan_defaults.order_shuffle_attempts

# Legacy ball-count rack heuristic
HANDICAP_BONUS_ALL_BALLS = 5   # bonus per handicap ball when one player ran the rack
HANDICAP_BALL_POINTS = 10      # assumed worth of an inferred handicap ball
BALLS_PER_INFERRED_HANDICAP = 5


# =============================================================================
# Chess Clock
# =============================================================================

DEFAULT_TIME_LIMIT_MINUTES = config.clock_defaults.time_limit_minutes
DEFAULT_WARNING_MINUTES = config.clock_defaults.warning_time_minutes
DEFAULT_TICK_INTERVAL = config.clock_defaults.tick_interval_seconds


# =============================================================================
# Helper Functions
# =============================================================================

def get_ball_score(ball_number: int, game_type: str) -> int:
    """
    Get point value for a pocketed ball under a rule set.

    Args:
        ball_number: Ball number as printed on the ball.
        game_type: GameType value ("SET_MATCH", "ROTATION", ...).

    Returns:
        Points awarded for pocketing the ball.
    """
    if game_type == "SET_MATCH":
        return SET_MATCH_MONEY_BALL_POINTS if ball_number == SET_MATCH_MONEY_BALL else 1
    if game_type == "ROTATION":
        return ball_number
    return 1


def clamp_multiplier(value: float) -> int:
    """Clamp a multiplier to the allowed integer range."""
    return max(MULTIPLIER_MIN, min(MULTIPLIER_MAX, int(round(value))))
