"""
Configuration settings for Wildgrid.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Any, Optional
import toml
import os
import copy


DEFAULT_CONTROLS: Dict[str, Any] = {
    "movement": {
        "up": "move_up",
        "down": "move_down",
        "left": "move_left",
        "right": "move_right",
    },
    "actions": {
        "m": "place_marker",
    },
    "quit": "q",
}


class GameConfig(BaseModel):
    """Configuration settings for the game."""

    # Game Metadata
    game_title: str = "Wildgrid"
    version: str = "0.1.0"

    # Display settings
    viewport_half_extent: int = Field(default=15, ge=1)  # 30x30 window

    # World settings
    chunk_size: int = Field(default=10, ge=1)
    world_seed: Optional[int] = None  # None draws a fresh world every run

    # Game settings
    player_start_x: int = 0
    player_start_y: int = 0
    message_log_size: int = Field(default=5, ge=1)

    # Loop timing (seconds)
    idle_sleep: float = Field(default=1.0 / 60, ge=0.0)  # 0 spins without yielding
    input_poll_interval: Optional[float] = Field(default=0.1, ge=0.0)
    join_timeout: float = Field(default=1.0, ge=0.0)

    # Paths
    crash_log: str = "game_debug.log"

    # Controls
    controls: Dict[str, Any] = Field(default_factory=lambda: copy.deepcopy(DEFAULT_CONTROLS))

    model_config = ConfigDict(extra="allow")

    @classmethod
    def load_from_toml(cls, path: str = "config.toml") -> "GameConfig":
        """Load configuration from a TOML file."""
        if not os.path.exists(path):
            print(f"Warning: Config file {path} not found. Using defaults.")
            return cls()

        try:
            with open(path, "r") as f:
                data = toml.load(f)

            # Flatten game settings for Pydantic
            game_settings = data.get("game", {})
            if "controls" in data:
                game_settings["controls"] = data["controls"]

            return cls(**game_settings)
        except Exception as e:
            print(f"Error loading config: {e}")
            return cls()


# Global config instance
CONFIG = GameConfig.load_from_toml()
