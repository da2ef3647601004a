from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np


class ShapeKind(IntEnum):
    # 1 block
    DOT = 0
    # 2 blocks
    DOMINO_H = 1
    DOMINO_V = 2
    # 3 blocks
    L_SMALL = 3
    L_SMALL_R = 4
    L_SMALL_F = 5
    L_SMALL_FR = 6
    LINE_3_H = 7
    LINE_3_V = 8
    # 4 blocks
    L_LARGE = 9
    L_LARGE_R = 10
    L_LARGE_F = 11
    L_LARGE_FR = 12
    T_SHAPE = 13
    T_SHAPE_R = 14
    T_SHAPE_F = 15
    T_SHAPE_L = 16
    SQUARE = 17
    Z_SHAPE = 18
    S_SHAPE = 19
    LINE_4_H = 20
    LINE_4_V = 21
    # 5 blocks
    PLUS = 22
    CORNER_3X3 = 23
    CORNER_3X3_R = 24


Shape = np.ndarray


def _shape(rows: Sequence[Sequence[int]]) -> Shape:
    arr = np.array(rows, dtype=np.int8)
    arr.flags.writeable = False
    return arr


SHAPES: Dict[ShapeKind, Shape] = {
    ShapeKind.DOT: _shape([[1]]),
    ShapeKind.DOMINO_H: _shape([[1, 1]]),
    ShapeKind.DOMINO_V: _shape([[1], [1]]),
    ShapeKind.L_SMALL: _shape([[1, 0], [1, 1]]),
    ShapeKind.L_SMALL_R: _shape([[0, 1], [1, 1]]),
    ShapeKind.L_SMALL_F: _shape([[1, 1], [1, 0]]),
    ShapeKind.L_SMALL_FR: _shape([[1, 1], [0, 1]]),
    ShapeKind.LINE_3_H: _shape([[1, 1, 1]]),
    ShapeKind.LINE_3_V: _shape([[1], [1], [1]]),
    ShapeKind.L_LARGE: _shape([[1, 0], [1, 0], [1, 1]]),
    ShapeKind.L_LARGE_R: _shape([[0, 1], [0, 1], [1, 1]]),
    ShapeKind.L_LARGE_F: _shape([[1, 1], [1, 0], [1, 0]]),
    ShapeKind.L_LARGE_FR: _shape([[1, 1], [0, 1], [0, 1]]),
    ShapeKind.T_SHAPE: _shape([[1, 1, 1], [0, 1, 0]]),
    ShapeKind.T_SHAPE_R: _shape([[0, 1], [1, 1], [0, 1]]),
    ShapeKind.T_SHAPE_F: _shape([[0, 1, 0], [1, 1, 1]]),
    ShapeKind.T_SHAPE_L: _shape([[1, 0], [1, 1], [1, 0]]),
    ShapeKind.SQUARE: _shape([[1, 1], [1, 1]]),
    ShapeKind.Z_SHAPE: _shape([[1, 1, 0], [0, 1, 1]]),
    ShapeKind.S_SHAPE: _shape([[0, 1, 1], [1, 1, 0]]),
    ShapeKind.LINE_4_H: _shape([[1, 1, 1, 1]]),
    ShapeKind.LINE_4_V: _shape([[1], [1], [1], [1]]),
    ShapeKind.PLUS: _shape([[0, 1, 0], [1, 1, 1], [0, 1, 0]]),
    ShapeKind.CORNER_3X3: _shape([[1, 1, 1], [1, 0, 0], [1, 0, 0]]),
    ShapeKind.CORNER_3X3_R: _shape([[1, 1, 1], [0, 0, 1], [0, 0, 1]]),
}

# 1-2 block pieces offered more often on a crowded board
SMALL_KINDS: Tuple[ShapeKind, ...] = (ShapeKind.DOT, ShapeKind.DOMINO_H, ShapeKind.DOMINO_V)


@dataclass(frozen=True)
class Piece:
    """One piece in the hand. Shapes are looked up, never copied or mutated."""

    kind: ShapeKind

    @property
    def shape(self) -> Shape:
        return SHAPES[self.kind]

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    @property
    def block_count(self) -> int:
        return int(np.count_nonzero(self.shape))

    @property
    def name(self) -> str:
        return self.kind.name

    def cells(self) -> List[Tuple[int, int]]:
        """Relative (dx, dy) offsets of the filled cells, row by row."""
        ys, xs = np.nonzero(self.shape)
        return [(int(dx), int(dy)) for dy, dx in zip(ys, xs)]

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        return [(origin_x + dx, origin_y + dy) for dx, dy in self.cells()]


class PieceGenerator:
    """Draws hands of pieces, favouring small pieces once the grid is crowded."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        crowded_threshold: float = 82.0,
        small_piece_chance: float = 1.0 / 3.0,
    ) -> None:
        self.rng = rng or random.Random()
        self.crowded_threshold = float(crowded_threshold)
        self.small_piece_chance = float(small_piece_chance)
        self.available_kinds: Tuple[ShapeKind, ...] = tuple(ShapeKind)
        self.small_kinds: Tuple[ShapeKind, ...] = SMALL_KINDS

    def seed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)

    def next(self, fill_percentage: float = 0.0) -> Piece:
        if fill_percentage > self.crowded_threshold:
            if self.rng.random() < self.small_piece_chance:
                return Piece(self.rng.choice(self.small_kinds))
        return Piece(self.rng.choice(self.available_kinds))

    def generate_batch(self, fill_percentage: float = 0.0, count: int = 3) -> List[Piece]:
        # Same percentage for every draw; no placeability guarantee
        return [self.next(fill_percentage) for _ in range(count)]
