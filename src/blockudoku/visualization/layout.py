from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from blockudoku.game import Piece


@dataclass
class Layout:
    """Pixel geometry of the board and the hand tray.

    The grid sits at ``grid_offset``; the hand tray is one row of slots
    below it, each ``hand_spacing`` pixels apart. A non-zero ``panel_width``
    reserves a column on the right for the leaderboard.
    """

    grid_size: int = 9
    cell_size: int = 48
    margin: int = 20
    header_height: int = 60
    hand_cell_size: int = 28
    hand_spacing: int = 150
    hand_gap: int = 30
    hand_slots: int = 3
    panel_width: int = 0

    @property
    def grid_offset(self) -> Tuple[int, int]:
        return self.margin, self.margin + self.header_height

    @property
    def board_px(self) -> int:
        return self.grid_size * self.cell_size

    @property
    def play_width(self) -> int:
        return max(self.board_px, self.hand_slots * self.hand_spacing)

    @property
    def panel_origin(self) -> Tuple[int, int]:
        _, gy = self.grid_offset
        return 2 * self.margin + self.play_width, gy

    @property
    def hand_origin(self) -> Tuple[int, int]:
        gx, gy = self.grid_offset
        return gx, gy + self.board_px + self.hand_gap

    @property
    def window_size(self) -> Tuple[int, int]:
        width = self.play_width + 2 * self.margin
        if self.panel_width:
            width += self.panel_width + self.margin
        _, hand_y = self.hand_origin
        height = hand_y + 5 * self.hand_cell_size + self.margin
        return width, height

    def fit(self, width: int, height: int) -> None:
        """Pick the largest cell size that fits the board in a resized window."""
        avail_w = width - 2 * self.margin
        if self.panel_width:
            avail_w -= self.panel_width + self.margin
        avail_h = height - 2 * self.margin - self.header_height - self.hand_gap - 5 * self.hand_cell_size
        self.cell_size = max(16, min(avail_w, avail_h) // self.grid_size)
        self.hand_spacing = max(5 * self.hand_cell_size, avail_w // self.hand_slots)

    def cell_rect(self, x: int, y: int) -> Tuple[int, int, int, int]:
        gx, gy = self.grid_offset
        return gx + x * self.cell_size, gy + y * self.cell_size, self.cell_size, self.cell_size

    def hand_slot_origin(self, index: int) -> Tuple[int, int]:
        hx, hy = self.hand_origin
        return hx + index * self.hand_spacing, hy

    def piece_at_position(self, hand, px: float, py: float) -> Optional[int]:
        """Index of the hand piece whose blocks contain the pixel, if any."""
        for index, piece in enumerate(hand):
            if piece is None:
                continue
            sx, sy = self.hand_slot_origin(index)
            for dx, dy in piece.cells():
                bx = sx + dx * self.hand_cell_size
                by = sy + dy * self.hand_cell_size
                if bx <= px <= bx + self.hand_cell_size and by <= py <= by + self.hand_cell_size:
                    return index
        return None

    def grid_position(self, px: float, py: float, piece: Optional[Piece] = None) -> Optional[Tuple[int, int]]:
        """Grid origin for a pointer position.

        With a piece, the pointer is taken as the centre of the dragged piece,
        so the origin is its top-left cell. Positions far off the board are
        discarded; anything near it is returned for the grid to validate.
        """
        if piece is not None:
            px -= piece.width * self.cell_size / 2
            py -= piece.height * self.cell_size / 2
            # round to the nearest cell rather than truncating
            px += self.cell_size / 2
            py += self.cell_size / 2
        gx, gy = self.grid_offset
        grid_x = math.floor((px - gx) / self.cell_size)
        grid_y = math.floor((py - gy) / self.cell_size)
        reach = self.grid_size + 1
        if not (-reach <= grid_x < 2 * reach and -reach <= grid_y < 2 * reach):
            return None
        return grid_x, grid_y
