"""Configuration management."""

from pathlib import Path

import yaml
from pydantic import BaseModel


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 5000


class GameConfig(BaseModel):
    """Game configuration."""

    num_players: int = 3
    cards_per_player: int = 12
    seed: int | None = None  # Fixed seed for reproducible shuffles


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    show_hands: bool = False


class GameLogConfig(BaseModel):
    """Configuration for the JSONL game event log."""

    enabled: bool = False
    output_path: str = "logs"


class Config(BaseModel):
    """Root configuration."""

    server: ServerConfig = ServerConfig()
    game: GameConfig = GameConfig()
    logging: LoggingConfig = LoggingConfig()
    game_log: GameLogConfig = GameLogConfig()


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses default config.

    Returns:
        Config object.
    """
    if path is None:
        return Config()

    config_path = Path(path)
    if not config_path.exists():
        return Config()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return Config(**data) if data else Config()
