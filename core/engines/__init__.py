"""Rule set engines for the scorekeeper core."""

from .bowlard import BowlardEngine
from .common import GameEngine
from .factory import EngineFactory, resolve_game_type
from .japan import JapanEngine
from .rotation import RotationEngine
from .set_match import SetMatchEngine

__all__ = [
    "BowlardEngine",
    "GameEngine",
    "EngineFactory",
    "resolve_game_type",
    "JapanEngine",
    "RotationEngine",
    "SetMatchEngine",
]
