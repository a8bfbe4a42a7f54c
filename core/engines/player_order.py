"""
Japan turn-order rotation.

When the order changes, the selected player goes first and the rest are
re-arranged:

- 2 players: the order stays as it is
- 3 players: the other two follow in reverse of their seat order after the
  selected player (A-B-C with B selected becomes B-A-C)
- 4+ players: the others are shuffled, rejecting any shuffle that keeps the
  same cycle (player -> next player, wrapping around) as the current order

A cycle ignores where the order nominally starts, so A-B-C-D and C-D-A-B are
the same cycle.
"""

import logging
import random
from typing import Optional, Sequence

from constants import ORDER_SHUFFLE_ATTEMPTS
from models.game_state import Game


logger = logging.getLogger(__name__)


def successor_map(order: Sequence[str]) -> dict[str, str]:
    """Map each player id to the id that plays after it."""
    return {pid: order[(i + 1) % len(order)] for i, pid in enumerate(order)}


def is_same_cycle(first: Sequence[str], second: Sequence[str]) -> bool:
    if len(first) != len(second):
        return False
    return successor_map(first) == successor_map(second)


def calculate_new_order(
    order: Sequence[str],
    selected_id: str,
    rng: Optional[random.Random] = None,
    max_attempts: int = ORDER_SHUFFLE_ATTEMPTS,
) -> tuple[str, ...]:
    """
    Compute the next turn order.

    Args:
        order: Current player ids in turn order.
        selected_id: Player who goes first in the new order.
        rng: Random source for 4+ players.
        max_attempts: Shuffles to try before falling back to a reversal.

    Returns:
        The new order. Unchanged for two players or an unknown selected_id.
    """
    order = tuple(order)
    if selected_id not in order or len(order) <= 2:
        return order

    # Others in seat order starting after the selected player
    i = order.index(selected_id)
    others = list(order[i + 1:] + order[:i])
    fallback = (selected_id, *reversed(others))
    if len(order) == 3:
        return fallback

    rng = rng or random.Random()
    for _ in range(max_attempts):
        shuffled = others[:]
        rng.shuffle(shuffled)
        candidate = (selected_id, *shuffled)
        if not is_same_cycle(order, candidate):
            return candidate

    logger.warning(f"No new cycle found in {max_attempts} shuffles, reversing order")
    return fallback


def player_order_for_racks(game: Game, start_rack: int, end_rack: int) -> tuple[str, ...]:
    """
    Turn order in force over racks start_rack..end_rack.

    The latest period covering the whole range wins. Falls back to the current
    order when no recorded period covers it.
    """
    for period in reversed(game.japan_player_order_history):
        if period.from_rack <= start_rack and end_rack <= period.to_rack:
            return period.player_order
    return tuple(p.id for p in game.players)
