"""
Game session: the single writer of one Game value.

A session owns the current Game, the engine for its rule set and, for timed
games, the chess clock. Every mutation runs under an asyncio.Lock and swaps
the Game reference, so clock ticks and player actions on the same event loop
never see a half-applied action.

On top of the engines the session handles match-level concerns:
    - marks the game COMPLETED (with winner) on victory, reopens it on undo
    - re-racks a Rotation table automatically once all 15 balls are down
    - Japan next-rack with an optional player-order change first
    - manual end, rematch and snapshot/restore including the clock state
"""

import asyncio
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from chess_clock import ChessClock
from engines.common import coerce_action
from engines.factory import EngineFactory, resolve_game_type
from game_utils import all_balls_pocketed, rematch_setups
from logging_config import game_id_var, game_type_var, get_logger
from models.actions import Action, EndGame, NextRack, PlayerOrderChange, ResetRack
from models.clock import ChessClockSettings
from models.events import RackResetShot, ShotType
from models.game_state import Game, GameStatus, GameType


logger = get_logger(__name__)


class GameSession:
    """
    One match in progress.

    Usage:
        session = GameSession.create("ROTATION", [{"name": "A", "target_score": 120},
                                                  {"name": "B", "target_score": 120}])
        await session.apply({"type": "pocket_ball", "ball_number": 15})
        await session.undo()
    """

    def __init__(
        self,
        game: Game,
        factory: Optional[EngineFactory] = None,
        clock: Optional[ChessClock] = None,
    ):
        self.factory = factory or EngineFactory()
        self.engine = self.factory.get_engine(game.type)
        self.clock = clock
        self.lock = asyncio.Lock()
        self._game = game

    @classmethod
    def create(
        cls,
        game_type: Union[GameType, str],
        player_setups: list[dict],
        settings=None,
        chess_clock: Optional[ChessClockSettings] = None,
        factory: Optional[EngineFactory] = None,
        time_source: Callable[[], float] = time.time,
    ) -> "GameSession":
        """
        Start a new game.

        Args:
            game_type: Rule set (unknown values fall back to Set Match).
            player_setups: Dicts with "name" and optional targets.
            settings: Rule set settings (JapanSettings or dict for Japan).
            chess_clock: Clock settings; a clock is attached when enabled.
            factory: Engine factory to use.
            time_source: Wall-clock source for the chess clock.
        """
        factory = factory or EngineFactory()
        engine = factory.get_engine(resolve_game_type(game_type))
        game = engine.initialize(player_setups, settings)

        clock = None
        if chess_clock is not None:
            game = replace(game, chess_clock=chess_clock)
            if chess_clock.enabled:
                clock = ChessClock(chess_clock, player_count=len(game.players), time_source=time_source)

        logger.with_context(game_id=game.id, game_type=game.type.value).info(
            f"Game created with {len(game.players)} players"
        )
        return cls(game, factory=factory, clock=clock)

    @property
    def game(self) -> Game:
        return self._game

    @property
    def is_over(self) -> bool:
        return self._game.status == GameStatus.COMPLETED

    def _bind_context(self) -> None:
        game_id_var.set(self._game.id)
        game_type_var.set(self._game.type.value)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def apply(self, action: Union[Action, dict]) -> Game:
        """
        Apply an action and settle victory.

        Raises:
            InvalidActionError: If a raw payload is malformed.
        """
        action = coerce_action(action)
        async with self.lock:
            self._bind_context()
            game = self._game
            if game.status == GameStatus.COMPLETED:
                logger.warning(f"Ignoring {action.type}: game is over")
                return game

            game = self.engine.apply_action(game, action)
            if (
                game is not self._game
                and game.type == GameType.ROTATION
                and all_balls_pocketed(game)
                and not self.engine.check_victory(game).is_game_over
            ):
                logger.info(f"All balls down, re-racking rack {game.current_rack}")
                game = self.engine.apply_action(game, ResetRack(auto=True))

            self._game = self._settle_victory(game)
            return self._game

    async def undo(self) -> Game:
        """
        Undo the last scoring action; an automatic re-rack is undone with its trigger.

        Undoing a manual end that logged no shot only reopens the game.
        """
        async with self.lock:
            self._bind_context()
            game = self._game
            if self._ended_without_shot(game):
                logger.info("Reopening game ended by players")
                self._game = self._reopen(game)
                return self._game

            last = game.last_shot
            if last is None:
                return game

            game = self.engine.undo(game)
            if isinstance(last, RackResetShot) and last.auto:
                game = self.engine.undo(game)

            self._game = self._settle_victory(self._reopen(game))
            return self._game

    async def next_rack(self, selected_player_id: Optional[str] = None) -> Game:
        """
        Settle the current Japan rack and start the next one.

        Args:
            selected_player_id: When given, the turn order changes first with
                this player going first.
        """
        if self._game.type != GameType.JAPAN:
            logger.warning(f"next_rack is only available in Japan games, not {self._game.type.value}")
            return self._game
        if selected_player_id is not None:
            await self.apply(PlayerOrderChange(selected_player_id=selected_player_id))
        return await self.apply(NextRack())

    def should_change_order(self) -> bool:
        """Whether a Japan game is due a player-order change at this rack."""
        check = getattr(self.engine, "should_change_order", None)
        return bool(check and check(self._game))

    async def end_game(self) -> Game:
        """End the game manually (Japan settles the current rack first)."""
        async with self.lock:
            self._bind_context()
            game = self._game
            if game.status == GameStatus.COMPLETED:
                return game
            if game.type == GameType.JAPAN:
                game = self.engine.apply_action(game, EndGame())
            result = self.engine.check_victory(game)
            self._game = self._complete(game, result.winner_id)
            logger.info("Game ended by players")
            return self._game

    def rematch(self) -> "GameSession":
        """A new session with the same players, rules and clock settings."""
        game = self._game
        session = GameSession.create(
            game.type,
            rematch_setups(game),
            settings=game.japan_settings,
            chess_clock=game.chess_clock,
            factory=self.factory,
            time_source=self.clock.time_source if self.clock else time.time,
        )
        return session

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    def start_clock(self) -> None:
        if self.clock and not self.is_over:
            self.clock.start()

    def stop_clock(self) -> None:
        if self.clock:
            self.clock.stop()

    def press_clock(self, player_index: int) -> None:
        """A player pressed their clock button."""
        if self.clock:
            self.clock.select_player(player_index)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def snapshot(self) -> dict:
        """JSON-compatible state sufficient to resume, including the clock."""
        game = self._game
        if self.clock:
            game = replace(game, chess_clock_state=self.clock.state)
        return game.to_dict()

    @classmethod
    def restore(
        cls,
        data: dict,
        factory: Optional[EngineFactory] = None,
        time_source: Callable[[], float] = time.time,
    ) -> "GameSession":
        """Rebuild a session from snapshot() output."""
        game = Game.from_dict(data)
        clock = None
        if game.chess_clock and game.chess_clock.enabled:
            clock = ChessClock(
                game.chess_clock,
                player_count=len(game.players),
                state=game.chess_clock_state,
                time_source=time_source,
            )
        return cls(game, factory=factory, clock=clock)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _settle_victory(self, game: Game) -> Game:
        if game.status == GameStatus.COMPLETED:
            return game
        result = self.engine.check_victory(game)
        if not result.is_game_over:
            return game
        logger.with_context(player_id=result.winner_id).info("Game over")
        return self._complete(game, result.winner_id)

    def _ended_without_shot(self, game: Game) -> bool:
        """A manual end that logged nothing: completed, no victory, no game_complete shot."""
        if game.status != GameStatus.COMPLETED:
            return False
        last = game.last_shot
        if last is not None and last.shot_type == ShotType.GAME_COMPLETE:
            return False
        return not self.engine.check_victory(game).is_game_over

    @staticmethod
    def _reopen(game: Game) -> Game:
        return replace(game, status=GameStatus.IN_PROGRESS, winner=None, end_time=None)

    def _complete(self, game: Game, winner_id: Optional[str]) -> Game:
        if self.clock:
            self.clock.stop()
            game = replace(game, chess_clock_state=self.clock.state)
        return replace(
            game,
            status=GameStatus.COMPLETED,
            winner=winner_id,
            end_time=datetime.now(timezone.utc),
        )
