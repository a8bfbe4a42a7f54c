"""
Scorekeeper Simulation Runner

Plays random games against the engines and checks the invariants that must
hold for any sequence of actions:
    - Japan racks are zero-sum and running totals always sum to 0
    - undoing every shot returns the game to its initial state

Usage:
    python simulate.py [num_games] [game_type] [num_players] [seed]

Examples:
    python simulate.py 10                # 10 games of every type
    python simulate.py 50 JAPAN 4        # 50 four-player Japan games
    python simulate.py 20 ROTATION 2 7   # reproducible run with seed 7
"""

import random
import sys
from dataclasses import replace
from typing import Optional

from constants import BOWLING_PINS, JAPAN_BALLS, ROTATION_BALLS, SET_MATCH_BALLS
from engines.common import GameEngine
from engines.factory import EngineFactory
from logging_config import setup_logging
from models.actions import (
    AddPins,
    MultiplyAll,
    NextRack,
    PlayerOrderChange,
    PocketBall,
    ResetRack,
    SetMultiplier,
    SwitchPlayer,
    WinSet,
)
from models.game_state import Game, GameType
from models.japan import JapanSettings


class SimulationStats:
    """Track simulation statistics."""

    def __init__(self):
        self.games_played = 0
        self.total_actions = 0
        self.total_racks = 0
        self.actions_by_type: dict[str, int] = {}
        self.zero_sum_violations = 0
        self.undo_mismatches = 0
        self.games_by_type: dict[str, int] = {}

    def record_game(self, game: Game):
        self.games_played += 1
        self.total_racks += game.current_rack
        self.games_by_type[game.type.value] = self.games_by_type.get(game.type.value, 0) + 1

    def record_action(self, action_type: str):
        self.total_actions += 1
        self.actions_by_type[action_type] = self.actions_by_type.get(action_type, 0) + 1

    @property
    def ok(self) -> bool:
        return self.zero_sum_violations == 0 and self.undo_mismatches == 0

    def report(self) -> str:
        lines = [
            "=" * 50,
            "SIMULATION RESULTS",
            "=" * 50,
            f"Games played: {self.games_played}",
            f"Total actions: {self.total_actions}",
            f"Avg actions/game: {self.total_actions / max(1, self.games_played):.1f}",
            f"Total racks: {self.total_racks}",
            "",
            "GAMES BY TYPE:",
        ]
        for name, count in sorted(self.games_by_type.items()):
            lines.append(f"  {name}: {count}")

        lines.append("")
        lines.append("ACTIONS:")
        for name, count in sorted(self.actions_by_type.items(), key=lambda x: -x[1]):
            lines.append(f"  {name}: {count}")

        lines.append("")
        lines.append("INVARIANTS:")
        lines.append(f"  Zero-sum violations: {self.zero_sum_violations}")
        lines.append(f"  Undo mismatches: {self.undo_mismatches}")
        lines.append("")
        lines.append("PASS" if self.ok else "FAIL")
        return "\n".join(lines)


def random_action(game: Game, rng: random.Random):
    """Pick a plausible next action for the game's rule set."""
    roll = rng.random()
    if game.type == GameType.SET_MATCH:
        if roll < 0.15:
            return WinSet(player_id=rng.choice(game.players).id)
        if roll < 0.35:
            return SwitchPlayer()
        return PocketBall(ball_number=rng.choice(SET_MATCH_BALLS))

    if game.type == GameType.ROTATION:
        if roll < 0.05:
            return ResetRack()
        if roll < 0.3:
            return SwitchPlayer()
        return PocketBall(ball_number=rng.choice(ROTATION_BALLS))

    if game.type == GameType.BOWLARD:
        return AddPins(pins=rng.randint(0, BOWLING_PINS))

    if roll < 0.1:
        return NextRack()
    if roll < 0.15:
        return SetMultiplier(value=rng.randint(1, 5))
    if roll < 0.18:
        return MultiplyAll(factor=rng.choice((2, 0.5)))
    if roll < 0.2:
        return PlayerOrderChange(selected_player_id=rng.choice(game.players).id)
    if roll < 0.4:
        return SwitchPlayer()
    return PocketBall(ball_number=rng.choice(JAPAN_BALLS))


def check_zero_sum(game: Game) -> bool:
    for rack in game.japan_rack_history:
        if sum(r.delta_points for r in rack.player_results) != 0:
            return False
        if sum(r.total_points for r in rack.player_results) != 0:
            return False
    return True


def undo_all(engine: GameEngine, game: Game) -> Game:
    while game.shot_history:
        game = engine.undo(game)
    return game


def run_game(
    engine: GameEngine,
    game_type: GameType,
    num_players: int,
    rng: random.Random,
    stats: SimulationStats,
    max_actions: int = 200,
) -> Game:
    """Play one random game and check its invariants."""
    setups = [
        {"name": f"Sim {i + 1}", "target_score": 120, "target_sets": 3}
        for i in range(num_players)
    ]
    settings = JapanSettings(order_change_enabled=True, deduction_enabled=True)
    initial = engine.initialize(setups, settings if game_type == GameType.JAPAN else None)
    game = initial

    for _ in range(max_actions):
        if engine.check_victory(game).is_game_over:
            break
        action = random_action(game, rng)
        game = engine.apply_action(game, action)
        stats.record_action(action.type)

    if game_type == GameType.JAPAN and not check_zero_sum(game):
        stats.zero_sum_violations += 1

    # Turn switches are not in the shot log, so compare from the same turn
    unwound = undo_all(engine, game)
    unwound = replace(
        unwound,
        players=tuple(
            replace(p, is_active=q.is_active) for p, q in zip(unwound.players, initial.players)
        ),
        current_player_index=initial.current_player_index,
    )
    if unwound != initial:
        stats.undo_mismatches += 1

    stats.record_game(game)
    return game


def run_simulation(
    num_games: int = 10,
    game_type: Optional[str] = None,
    num_players: int = 2,
    seed: Optional[int] = None,
) -> SimulationStats:
    """Run num_games random games of one type, or of every type."""
    rng = random.Random(seed)
    factory = EngineFactory(rng=rng)
    stats = SimulationStats()
    types = [GameType(game_type.upper())] if game_type else list(GameType)

    print(f"Running {num_games} game(s) per type: {', '.join(t.value for t in types)}")
    for gt in types:
        engine = factory.get_engine(gt)
        players = 1 if gt == GameType.BOWLARD else num_players
        for i in range(num_games):
            run_game(engine, gt, players, rng, stats)
            if (i + 1) % 10 == 0:
                print(f"  {gt.value}: {i + 1}/{num_games}")

    print()
    print(stats.report())
    return stats


if __name__ == "__main__":
    setup_logging(level="WARNING")
    num_games = int(sys.argv[1]) if len(sys.argv) > 1 else 10
    game_type = sys.argv[2] if len(sys.argv) > 2 else None
    num_players = int(sys.argv[3]) if len(sys.argv) > 3 else 2
    seed = int(sys.argv[4]) if len(sys.argv) > 4 else None
    stats = run_simulation(num_games, game_type, num_players, seed)
    sys.exit(0 if stats.ok else 1)
