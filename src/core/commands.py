"""
Commands passed from the input thread to the game thread.
"""

from enum import Enum
from typing import Tuple


class Command(Enum):
    """A discrete instruction derived from one key press."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    PLACE_MARKER = "place_marker"
    PAUSE = "pause"

    @property
    def delta(self) -> Tuple[int, int]:
        """Movement (dx, dy) of the command, (0, 0) for non-movement."""
        return MOVE_DELTAS.get(self, (0, 0))

    @property
    def is_movement(self) -> bool:
        return self in MOVE_DELTAS


# Screen rows grow downward
MOVE_DELTAS = {
    Command.MOVE_UP: (0, -1),
    Command.MOVE_DOWN: (0, 1),
    Command.MOVE_LEFT: (-1, 0),
    Command.MOVE_RIGHT: (1, 0),
}
