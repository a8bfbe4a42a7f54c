"""
Centralized configuration for the billiard scorekeeper core.

Configuration is loaded from (in order of precedence):
1. Environment variables
2. .env file (if exists)
3. Default values

Usage:
    from config import config
    print(config.LOG_LEVEL)
    print(config.japan_defaults.order_change_interval)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off"):
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float environment variable."""
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_int_list(key: str, default: list[int]) -> list[int]:
    """Get a comma-separated list of integers, falling back on any bad entry."""
    raw = os.environ.get(key, "")
    if not raw.strip():
        return list(default)
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        return list(default)


@dataclass
class JapanDefaults:
    """Default Japan rule settings."""
    handicap_balls: list[int] = field(default_factory=lambda: [5, 9])
    order_change_interval: int = 10
    order_change_enabled: bool = False
    multiplier_min: int = 1
    multiplier_max: int = 100
    order_shuffle_attempts: int = 100


@dataclass
class ClockDefaults:
    """Default chess clock settings."""
    time_limit_minutes: float = 30
    warning_time_minutes: float = 3
    tick_interval_seconds: float = 0.1


@dataclass
class ScorekeeperConfig:
    """Scorekeeper configuration."""
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Snapshot storage for resuming a game
    SNAPSHOT_DB_PATH: str = "scorekeeper.db"

    japan_defaults: JapanDefaults = field(default_factory=JapanDefaults)
    clock_defaults: ClockDefaults = field(default_factory=ClockDefaults)

    @classmethod
    def from_env(cls) -> "ScorekeeperConfig":
        """Load configuration from environment variables."""
        return cls(
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            SNAPSHOT_DB_PATH=get_env("SNAPSHOT_DB_PATH", "scorekeeper.db"),
            japan_defaults=JapanDefaults(
                handicap_balls=get_env_int_list("JAPAN_HANDICAP_BALLS", [5, 9]),
                order_change_interval=get_env_int("JAPAN_ORDER_CHANGE_INTERVAL", 10),
                order_change_enabled=get_env_bool("JAPAN_ORDER_CHANGE_ENABLED", False),
                multiplier_min=get_env_int("JAPAN_MULTIPLIER_MIN", 1),
                multiplier_max=get_env_int("JAPAN_MULTIPLIER_MAX", 100),
                order_shuffle_attempts=get_env_int("JAPAN_ORDER_SHUFFLE_ATTEMPTS", 100),
            ),
            clock_defaults=ClockDefaults(
                time_limit_minutes=get_env_float("CLOCK_TIME_LIMIT_MINUTES", 30),
                warning_time_minutes=get_env_float("CLOCK_WARNING_MINUTES", 3),
                tick_interval_seconds=get_env_float("CLOCK_TICK_INTERVAL", 0.1),
            ),
        )


# Global config instance - loaded once at module import
config = ScorekeeperConfig.from_env()


def reload_config() -> ScorekeeperConfig:
    """Reload configuration from environment (useful for testing)."""
    global config
    config = ScorekeeperConfig.from_env()
    return config
