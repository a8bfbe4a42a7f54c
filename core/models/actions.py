"""
Action payloads accepted by the engines.

Actions are a discriminated union keyed by ``type``. Engines dispatch on that
tag; raw dictionaries coming from a caller go through parse_action() first.

Usage:
    action = parse_action({"type": "pocket_ball", "ball_number": 9})
    game = engine.apply_action(game, action)
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class InvalidActionError(ValueError):
    """Raised when a raw action payload cannot be parsed."""
    pass


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Turn bookkeeping (no shot logged)
# =============================================================================

class SwitchPlayer(_Action):
    type: Literal["switch_player"] = "switch_player"


class SelectPlayer(_Action):
    type: Literal["select_player"] = "select_player"
    player_index: int = Field(ge=0)


# =============================================================================
# Set Match / Rotation
# =============================================================================

class PocketBall(_Action):
    """Pocket a numbered ball. Japan counts it as a 1-point ball click."""
    type: Literal["pocket_ball"] = "pocket_ball"
    ball_number: int = Field(ge=1, le=15)
    player_id: Optional[str] = None


class WinSet(_Action):
    type: Literal["win_set"] = "win_set"
    player_id: str


class ResetRack(_Action):
    type: Literal["reset_rack"] = "reset_rack"
    auto: bool = False


# =============================================================================
# Bowlard
# =============================================================================

class AddPins(_Action):
    type: Literal["add_pins"] = "add_pins"
    pins: int = Field(ge=0)


# =============================================================================
# Japan
# =============================================================================

class SetMultiplier(_Action):
    type: Literal["set_multiplier"] = "set_multiplier"
    value: int
    label: str = ""


class MultiplyAll(_Action):
    """Scale the rack multiplier, e.g. factor 2 doubles and 0.5 halves."""
    type: Literal["multiply_all"] = "multiply_all"
    factor: float = Field(gt=0)


class Deduction(_Action):
    type: Literal["deduction"] = "deduction"
    value: int = Field(ge=0)
    label: str = ""
    player_id: Optional[str] = None


class NextRack(_Action):
    type: Literal["next_rack"] = "next_rack"


class RackComplete(_Action):
    """Settle a rack from raw ball counts (legacy two-player entry)."""
    type: Literal["rack_complete"] = "rack_complete"
    player1_balls: int = Field(ge=0)
    player2_balls: int = Field(ge=0)


class PlayerOrderChange(_Action):
    type: Literal["player_order_change"] = "player_order_change"
    selected_player_id: str


class EndGame(_Action):
    type: Literal["end_game"] = "end_game"


Action = Annotated[
    Union[
        SwitchPlayer,
        SelectPlayer,
        PocketBall,
        WinSet,
        ResetRack,
        AddPins,
        SetMultiplier,
        MultiplyAll,
        Deduction,
        NextRack,
        RackComplete,
        PlayerOrderChange,
        EndGame,
    ],
    Field(discriminator="type"),
]

_action_adapter = TypeAdapter(Action)


def parse_action(payload: dict) -> Action:
    """
    Validate a raw action payload.

    Args:
        payload: Dictionary with a "type" key and the action's fields.

    Returns:
        The matching action model.

    Raises:
        InvalidActionError: If the payload is not a valid action.
    """
    try:
        return _action_adapter.validate_python(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'action'}: {err['msg']}"
            for err in e.errors()
        )
        action_type = payload.get("type") if isinstance(payload, dict) else None
        raise InvalidActionError(f"Invalid action {action_type!r}: {problems}") from e
