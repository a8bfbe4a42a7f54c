"""
Japan rule set value types: settings, rack results and player-order periods.
"""

from dataclasses import dataclass, field
from typing import Optional

from constants import (
    DEFAULT_HANDICAP_BALLS,
    DEFAULT_ORDER_CHANGE_ENABLED,
    DEFAULT_ORDER_CHANGE_INTERVAL,
)


@dataclass(frozen=True)
class JapanMultiplier:
    """A multiplier button offered during play (e.g. label "x2", value 2)."""
    label: str
    value: int

    def to_dict(self) -> dict:
        return {"label": self.label, "value": self.value}

    @classmethod
    def from_dict(cls, d: dict) -> "JapanMultiplier":
        return cls(label=d["label"], value=d["value"])


@dataclass(frozen=True)
class JapanDeduction:
    """A deduction button offered during play (e.g. label "-1", value 1)."""
    label: str
    value: int

    def to_dict(self) -> dict:
        return {"label": self.label, "value": self.value}

    @classmethod
    def from_dict(cls, d: dict) -> "JapanDeduction":
        return cls(label=d["label"], value=d["value"])


@dataclass(frozen=True)
class JapanSettings:
    """
    Japan game settings chosen at setup.

    Attributes:
        handicap_balls: Ball numbers with extra weight in the ball-count heuristic.
        multipliers: Multiplier buttons shown when multipliers_enabled.
        deduction_enabled: Whether deduction buttons are available.
        deductions: Deduction buttons.
        order_change_interval: Racks per player-order period.
        order_change_enabled: Whether the order is re-drawn every interval.
        multipliers_enabled: Whether multiplier buttons are shown.
    """
    handicap_balls: tuple[int, ...] = DEFAULT_HANDICAP_BALLS
    multipliers: tuple[JapanMultiplier, ...] = (JapanMultiplier("x2", 2),)
    deduction_enabled: bool = False
    deductions: tuple[JapanDeduction, ...] = ()
    order_change_interval: int = DEFAULT_ORDER_CHANGE_INTERVAL
    order_change_enabled: bool = DEFAULT_ORDER_CHANGE_ENABLED
    multipliers_enabled: bool = False

    def to_dict(self) -> dict:
        return {
            "handicap_balls": list(self.handicap_balls),
            "multipliers": [m.to_dict() for m in self.multipliers],
            "deduction_enabled": self.deduction_enabled,
            "deductions": [d.to_dict() for d in self.deductions],
            "order_change_interval": self.order_change_interval,
            "order_change_enabled": self.order_change_enabled,
            "multipliers_enabled": self.multipliers_enabled,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "JapanSettings":
        defaults = cls()
        interval = d.get("order_change_interval") or defaults.order_change_interval
        return cls(
            handicap_balls=tuple(d.get("handicap_balls", defaults.handicap_balls)),
            multipliers=tuple(
                JapanMultiplier.from_dict(m) for m in d.get("multipliers", [])
            ) if "multipliers" in d else defaults.multipliers,
            deduction_enabled=d.get("deduction_enabled", False),
            deductions=tuple(JapanDeduction.from_dict(x) for x in d.get("deductions", [])),
            order_change_interval=max(1, int(interval)),
            order_change_enabled=d.get("order_change_enabled", defaults.order_change_enabled),
            multipliers_enabled=d.get("multipliers_enabled", False),
        )


@dataclass(frozen=True)
class JapanPlayerRackResult:
    """
    One player's line in a completed rack.

    Attributes:
        player_id: Player the line belongs to.
        earned_points: Points pocketed this rack, multiplier applied.
        delta_points: Net change after redistribution with the other players.
        total_points: Running total after this rack.
    """
    player_id: str
    earned_points: int
    delta_points: int
    total_points: int

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "earned_points": self.earned_points,
            "delta_points": self.delta_points,
            "total_points": self.total_points,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "JapanPlayerRackResult":
        return cls(
            player_id=d["player_id"],
            earned_points=d["earned_points"],
            delta_points=d["delta_points"],
            total_points=d["total_points"],
        )


@dataclass(frozen=True)
class JapanRackResult:
    """Redistribution result for one rack."""
    rack_number: int
    player_results: tuple[JapanPlayerRackResult, ...] = ()

    def for_player(self, player_id: str) -> Optional[JapanPlayerRackResult]:
        for result in self.player_results:
            if result.player_id == player_id:
                return result
        return None

    def to_dict(self) -> dict:
        return {
            "rack_number": self.rack_number,
            "player_results": [r.to_dict() for r in self.player_results],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "JapanRackResult":
        return cls(
            rack_number=d["rack_number"],
            player_results=tuple(
                JapanPlayerRackResult.from_dict(r) for r in d.get("player_results", [])
            ),
        )


@dataclass(frozen=True)
class JapanPlayerOrder:
    """The turn order in force from from_rack to to_rack (inclusive)."""
    from_rack: int
    to_rack: int
    player_order: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "from_rack": self.from_rack,
            "to_rack": self.to_rack,
            "player_order": list(self.player_order),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "JapanPlayerOrder":
        return cls(
            from_rack=d["from_rack"],
            to_rack=d["to_rack"],
            player_order=tuple(d.get("player_order", [])),
        )
