"""
Chunked storage for the lazily generated world.
Cells are created on first access and kept for the rest of the run.
"""

import numpy as np
from typing import Dict, Iterator, Optional, Tuple

from world.map import Cell, CellContent, Position, base_from_roll


class Chunk:
    """A square bucket of generated cells."""

    __slots__ = ["x", "y", "size", "world_x", "world_y", "cells"]

    def __init__(self, x: int, y: int, size: int):
        self.x = x  # Chunk coordinate (not world coordinate)
        self.y = y
        self.size = size
        self.world_x = x * size  # World coordinate of top-left corner
        self.world_y = y * size
        # Local (x, y) -> Cell, only for cells generated so far
        self.cells: Dict[Tuple[int, int], Cell] = {}

    def get_world_pos(self, local_x: int, local_y: int) -> Position:
        """Convert chunk-local coordinates to world coordinates."""
        return (self.world_x + local_x, self.world_y + local_y)

    def get_local_pos(self, world_x: int, world_y: int) -> Tuple[int, int]:
        """Convert world coordinates to chunk-local coordinates."""
        return (world_x - self.world_x, world_y - self.world_y)

    def __len__(self) -> int:
        return len(self.cells)


class World:
    """Unbounded grid of cells, generated on demand and never evicted."""

    def __init__(self, rng=None, chunk_size: int = 10):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        # Anything with a random() -> float in [0, 1) will do
        self.rng = rng if rng is not None else np.random.default_rng()
        self.chunk_size = chunk_size
        self.chunks: Dict[Tuple[int, int], Chunk] = {}
        self._cell_count = 0

    def get_chunk_coords(self, world_x: int, world_y: int) -> Tuple[int, int]:
        """Convert world coordinates to chunk coordinates."""
        return (world_x // self.chunk_size, world_y // self.chunk_size)

    def _get_chunk(self, pos: Position, create: bool) -> Optional[Chunk]:
        coords = self.get_chunk_coords(*pos)
        chunk = self.chunks.get(coords)
        if chunk is None and create:
            chunk = Chunk(coords[0], coords[1], self.chunk_size)
            self.chunks[coords] = chunk
        return chunk

    def _generate(self) -> Cell:
        roll = float(self.rng.random())
        return Cell(base_from_roll(roll))

    def get_or_generate(self, pos: Position) -> Cell:
        """Return the cell at pos, generating it on first access."""
        chunk = self._get_chunk(pos, create=True)
        local = chunk.get_local_pos(*pos)
        cell = chunk.cells.get(local)
        if cell is None:
            cell = self._generate()
            chunk.cells[local] = cell
            self._cell_count += 1
        return cell

    def try_get(self, pos: Position) -> Optional[Cell]:
        """Return the cell at pos if it was ever generated, without generating it."""
        chunk = self._get_chunk(pos, create=False)
        if chunk is None:
            return None
        return chunk.cells.get(chunk.get_local_pos(*pos))

    def set_content(self, pos: Position, content: CellContent):
        """Place content at pos.

        Raises CellOccupied if the cell already holds something.
        """
        self.get_or_generate(pos).place(pos, content)

    def generated_positions(self) -> Iterator[Position]:
        """Iterate over every position generated so far."""
        for chunk in self.chunks.values():
            for local in chunk.cells:
                yield chunk.get_world_pos(*local)

    def chunk_count(self) -> int:
        """Get the number of chunks touched so far."""
        return len(self.chunks)

    def __contains__(self, pos: Position) -> bool:
        return self.try_get(pos) is not None

    def __len__(self) -> int:
        return self._cell_count

    def render_viewport(
        self,
        center: Position,
        half_extent: int,
        player: Optional[Position] = None,
    ) -> str:
        """Render the square window around center as ANSI-styled rows.

        Rows run from center.y - half_extent to center.y + half_extent - 1,
        columns likewise. The player (center unless given) overrides content.
        """
        if player is None:
            player = center
        cx, cy = center
        rows = []
        for y in range(cy - half_extent, cy + half_extent):
            row = []
            for x in range(cx - half_extent, cx + half_extent):
                cell = self.get_or_generate((x, y))
                row.append(cell.to_colored_string((x, y) == player))
            rows.append("".join(row))
        # Raw mode does not translate \n into a carriage return
        return "\r\n".join(rows)


def create_world(seed: Optional[int] = None, chunk_size: int = 10) -> World:
    """Create a world whose terrain is reproducible for a given seed."""
    return World(rng=np.random.default_rng(seed), chunk_size=chunk_size)
