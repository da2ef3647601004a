from __future__ import annotations

import logging
from typing import Optional, Tuple

from blockudoku.game import BlockudokuGame, ClearSet, Piece, TurnResult

from .layout import Layout

logger = logging.getLogger(__name__)


class PointerInput:
    """Turns pointer drags into placement requests.

    Legality is left to the game; this class only maps pixels to a
    ``(piece_index, grid_x, grid_y)`` request.
    """

    def __init__(self, game: BlockudokuGame, layout: Layout) -> None:
        self.game = game
        self.layout = layout
        self.selected_index: Optional[int] = None
        self.pointer: Tuple[float, float] = (0.0, 0.0)

    @property
    def is_dragging(self) -> bool:
        return self.selected_index is not None

    @property
    def selected_piece(self) -> Optional[Piece]:
        if self.selected_index is None:
            return None
        return self.game.get_piece(self.selected_index)

    def pointer_down(self, px: float, py: float) -> bool:
        self.pointer = (px, py)
        if self.game.game_over or self.game.is_animating:
            return False
        index = self.layout.piece_at_position(self.game.hand, px, py)
        if index is None:
            return False
        self.selected_index = index
        return True

    def pointer_move(self, px: float, py: float) -> None:
        self.pointer = (px, py)

    def target_cell(self) -> Optional[Tuple[int, int]]:
        piece = self.selected_piece
        if piece is None:
            return None
        return self.layout.grid_position(self.pointer[0], self.pointer[1], piece)

    def ghost(self) -> Optional[Tuple[Piece, int, int, Optional[ClearSet]]]:
        """Dragged piece, its target origin and what it would clear there."""
        piece = self.selected_piece
        target = self.target_cell()
        if piece is None or target is None:
            return None
        x, y = target
        return piece, x, y, self.game.preview(self.selected_index, x, y)

    def pointer_up(self, px: float, py: float) -> Optional[TurnResult]:
        self.pointer = (px, py)
        index = self.selected_index
        target = self.target_cell()
        self.cancel()
        if index is None or target is None:
            return None
        result = self.game.place_piece(index, target[0], target[1])
        if not result.accepted:
            logger.debug("Rejected drop of slot %d at %s", index, target)
        return result

    def cancel(self) -> None:
        self.selected_index = None
