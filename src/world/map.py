from enum import Enum
from typing import Optional, Tuple

from rich.color import ColorSystem
from rich.style import Style

# Positions are plain (x, y) tuples of Python ints, so they never wrap
Position = Tuple[int, int]


class CellBase(Enum):
    """Terrain under a cell. Fixed when the cell is generated."""

    GRASS = "grass"
    WATER = "water"
    SAND = "sand"
    STONE = "stone"


class CellContent(Enum):
    """Something placed on top of the terrain."""

    FOOD = "food"
    POISON = "poison"
    MARKER = "marker"


PLAYER_CHAR = "*"
EMPTY_CHAR = " "

CONTENT_CHARS = {
    CellContent.FOOD: "F",
    CellContent.POISON: "P",
    CellContent.MARKER: "M",
}

CONTENT_STYLES = {
    CellContent.FOOD: Style(color="yellow"),
    CellContent.POISON: Style(color="red"),
    CellContent.MARKER: Style(color="magenta", bold=True),
}

PLAYER_STYLE = Style(color="black", bold=True)

BASE_STYLES = {
    CellBase.GRASS: Style(bgcolor="green"),
    CellBase.WATER: Style(bgcolor="blue"),
    CellBase.SAND: Style(bgcolor="yellow"),
    CellBase.STONE: Style(bgcolor="white"),
}


class WorldError(Exception):
    """Base class for recoverable world errors."""


class CellOccupied(WorldError):
    """Raised when content is placed on a cell that already holds some."""

    def __init__(self, position: Position, existing: CellContent):
        self.position = position
        self.existing = existing
        super().__init__(
            f"Cell ({position[0]}, {position[1]}) already holds {existing.value}"
        )


class Cell:
    """Represents a single tile of the world."""

    __slots__ = ["_base", "_content", "height"]

    def __init__(
        self,
        base: CellBase,
        content: Optional[CellContent] = None,
        height: int = 0,
    ):
        self._base = base
        self._content = content
        # Reserved for elevation, nothing reads it yet
        self.height = height

    @property
    def base(self) -> CellBase:
        return self._base

    @property
    def content(self) -> Optional[CellContent]:
        return self._content

    @property
    def is_empty(self) -> bool:
        return self._content is None

    def place(self, position: Position, content: CellContent):
        """Put content on this cell. Content can only ever be set once."""
        if content is None:
            raise ValueError("Cell content cannot be cleared")
        if self._content is not None:
            raise CellOccupied(position, self._content)
        self._content = content

    def get_char(self, is_player: bool = False) -> str:
        """Get the character representation of the cell."""
        if is_player:
            return PLAYER_CHAR
        if self._content is None:
            return EMPTY_CHAR
        return CONTENT_CHARS[self._content]

    def get_style(self, is_player: bool = False) -> Style:
        """Foreground from the content or player, background from the terrain."""
        if is_player:
            fg = PLAYER_STYLE
        else:
            fg = CONTENT_STYLES.get(self._content, Style())
        return fg + BASE_STYLES[self._base]

    def to_colored_string(self, is_player: bool = False) -> str:
        """Render the cell glyph as an ANSI-styled string."""
        return self.get_style(is_player).render(
            self.get_char(is_player), color_system=ColorSystem.STANDARD
        )

    def __repr__(self) -> str:
        return f"Cell(base={self._base.name}, content={self._content}, height={self.height})"


def base_from_roll(roll: float) -> CellBase:
    """Pick a terrain for a uniform roll in [0, 1).

    Water is never rolled; it is kept as a terrain for later use.
    """
    if roll < 0.5:
        return CellBase.GRASS
    elif roll < 0.9:
        return CellBase.STONE
    return CellBase.SAND
