"""
Engine lookup by game type.

The factory builds one engine per rule set when it is constructed and hands
the same instance out afterwards. Pass it where engines are needed instead of
keeping a module-level registry.
"""

import logging
import random
from typing import Optional, Union

from engines.bowlard import BowlardEngine
from engines.common import GameEngine
from engines.japan import JapanEngine
from engines.rotation import RotationEngine
from engines.set_match import SetMatchEngine
from models.game_state import GameType


logger = logging.getLogger(__name__)


def resolve_game_type(raw: Union[GameType, str, None]) -> GameType:
    """
    Parse a game type, defaulting unknown values to Set Match.

    Accepts enum values in any case ("rotation", "JAPAN").
    """
    if isinstance(raw, GameType):
        return raw
    try:
        return GameType(str(raw).upper())
    except ValueError:
        logger.warning(f"Unknown game type {raw!r}, defaulting to {GameType.SET_MATCH.value}")
        return GameType.SET_MATCH


class EngineFactory:
    """Constructed-once table of engines keyed by game type."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source handed to engines that shuffle (Japan order changes).
        """
        self._engines: dict[GameType, GameEngine] = {
            GameType.SET_MATCH: SetMatchEngine(),
            GameType.ROTATION: RotationEngine(),
            GameType.BOWLARD: BowlardEngine(),
            GameType.JAPAN: JapanEngine(rng=rng),
        }

    def get_engine(self, game_type: Union[GameType, str]) -> GameEngine:
        return self._engines[resolve_game_type(game_type)]

    @property
    def supported_game_types(self) -> list[GameType]:
        return list(self._engines)

    def is_supported(self, game_type: Union[GameType, str]) -> bool:
        value = game_type.value if isinstance(game_type, GameType) else str(game_type).upper()
        return value in {t.value for t in self._engines}
