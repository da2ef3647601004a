from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Set, Tuple

import numpy as np

from .pieces import Piece


Coordinate = Tuple[int, int]


class InvalidPlacementError(ValueError):
    """Raised when a piece is written to the grid without a legal origin."""


@dataclass(frozen=True)
class ClearSet:
    """Full rows, columns and 3x3 boxes found in one scan.

    Boxes are addressed as (box_row, box_col), each in 0..2.
    """

    rows: FrozenSet[int] = field(default_factory=frozenset)
    cols: FrozenSet[int] = field(default_factory=frozenset)
    boxes: FrozenSet[Coordinate] = field(default_factory=frozenset)

    @property
    def count(self) -> int:
        return len(self.rows) + len(self.cols) + len(self.boxes)

    def __bool__(self) -> bool:
        return self.count > 0

    def cells(self, size: int = 9, box_size: int = 3) -> Set[Coordinate]:
        """(x, y) of every cell covered by any cleared region, each once."""
        covered: Set[Coordinate] = set()
        for row in self.rows:
            covered.update((x, row) for x in range(size))
        for col in self.cols:
            covered.update((col, y) for y in range(size))
        for box_row, box_col in self.boxes:
            y0, x0 = box_row * box_size, box_col * box_size
            covered.update(
                (x, y) for y in range(y0, y0 + box_size) for x in range(x0, x0 + box_size)
            )
        return covered


class GameGrid:
    """9x9 occupancy grid with row, column and box clearing.

    Cells are 0 (empty) or 1 (filled) and indexed as ``cells[y, x]``.
    """

    def __init__(self, size: int = 9, box_size: int = 3) -> None:
        if size % box_size != 0:
            raise ValueError(f"grid size {size} is not a multiple of box size {box_size}")
        self.size = int(size)
        self.box_size = int(box_size)
        self.cells = np.zeros((self.size, self.size), dtype=np.int8)

    def reset(self) -> None:
        self.cells.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def can_place(self, piece: Piece, origin_x: int, origin_y: int) -> bool:
        for x, y in piece.cells_at(origin_x, origin_y):
            if not self.is_inside(x, y):
                return False
            if self.cells[y, x] != 0:
                return False
        return True

    def place(self, piece: Piece, origin_x: int, origin_y: int) -> int:
        """Fill the piece's cells and return how many were placed.

        The whole placement is checked before the first write, so a bad
        origin leaves the grid untouched.
        """
        if not self.can_place(piece, origin_x, origin_y):
            raise InvalidPlacementError(
                f"{piece.name} does not fit at ({origin_x}, {origin_y})"
            )
        cells = piece.cells_at(origin_x, origin_y)
        for x, y in cells:
            self.cells[y, x] = 1
        return len(cells)

    def detect_clears(self, cells: Optional[np.ndarray] = None) -> ClearSet:
        grid = self.cells if cells is None else np.asarray(cells)
        full = grid != 0
        rows = frozenset(int(r) for r in np.flatnonzero(np.all(full, axis=1)))
        cols = frozenset(int(c) for c in np.flatnonzero(np.all(full, axis=0)))
        n = self.size // self.box_size
        boxes = set()
        for box_row in range(n):
            for box_col in range(n):
                y0, x0 = box_row * self.box_size, box_col * self.box_size
                if np.all(full[y0 : y0 + self.box_size, x0 : x0 + self.box_size]):
                    boxes.add((box_row, box_col))
        return ClearSet(rows=rows, cols=cols, boxes=frozenset(boxes))

    def apply_clears(self, clears: ClearSet) -> int:
        """Empty every cleared region; returns the number of cells freed."""
        before = int(np.count_nonzero(self.cells))
        for row in clears.rows:
            self.cells[row, :] = 0
        for col in clears.cols:
            self.cells[:, col] = 0
        for box_row, box_col in clears.boxes:
            y0, x0 = box_row * self.box_size, box_col * self.box_size
            self.cells[y0 : y0 + self.box_size, x0 : x0 + self.box_size] = 0
        return before - int(np.count_nonzero(self.cells))

    def preview_clears(self, piece: Piece, origin_x: int, origin_y: int) -> Optional[ClearSet]:
        """What a placement would clear, or None if it is illegal. Never mutates."""
        if not self.can_place(piece, origin_x, origin_y):
            return None
        scratch = self.cells.copy()
        for x, y in piece.cells_at(origin_x, origin_y):
            scratch[y, x] = 1
        return self.detect_clears(scratch)

    def valid_origins(self, piece: Piece) -> List[Coordinate]:
        return [
            (x, y)
            for y in range(self.size)
            for x in range(self.size)
            if self.can_place(piece, x, y)
        ]

    def fits_anywhere(self, piece: Piece) -> bool:
        for y in range(self.size):
            for x in range(self.size):
                if self.can_place(piece, x, y):
                    return True
        return False

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.cells))

    def filled_percentage(self) -> float:
        return self.filled_count() / float(self.size * self.size) * 100.0

    def copy(self) -> "GameGrid":
        new_grid = GameGrid(self.size, self.box_size)
        new_grid.cells = self.cells.copy()
        return new_grid

    def clone_state(self) -> np.ndarray:
        return self.cells.copy()
