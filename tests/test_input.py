from blockudoku.game import Piece, ShapeKind
from blockudoku.visualization import Layout, PointerInput

from conftest import hand_of


def _cell_centre(layout, x, y):
    left, top, w, h = layout.cell_rect(x, y)
    return left + w / 2, top + h / 2


def test_piece_hit_test_only_on_blocks():
    layout = Layout()
    hand = hand_of(ShapeKind.L_SMALL_R, None, ShapeKind.DOT)
    sx, sy = layout.hand_slot_origin(0)
    size = layout.hand_cell_size
    # the empty top-left corner of the shape is not a hit
    assert layout.piece_at_position(hand, sx + size / 2, sy + size / 2) is None
    assert layout.piece_at_position(hand, sx + size * 1.5, sy + size / 2) == 0
    sx2, sy2 = layout.hand_slot_origin(1)
    assert layout.piece_at_position(hand, sx2 + 2, sy2 + 2) is None
    sx3, sy3 = layout.hand_slot_origin(2)
    assert layout.piece_at_position(hand, sx3 + 2, sy3 + 2) == 2


def test_grid_position_centres_piece_on_pointer():
    layout = Layout()
    assert layout.grid_position(*_cell_centre(layout, 4, 4), Piece(ShapeKind.DOT)) == (4, 4)
    # a 3x3 piece held by its centre lands with its top-left one cell up-left
    assert layout.grid_position(*_cell_centre(layout, 4, 4), Piece(ShapeKind.PLUS)) == (3, 3)
    assert layout.grid_position(-5000, -5000, Piece(ShapeKind.DOT)) is None


def test_drag_and_drop_places_piece(game):
    layout = Layout()
    pointer = PointerInput(game, layout)
    game.hand = hand_of(ShapeKind.DOT, ShapeKind.SQUARE, ShapeKind.SQUARE)
    sx, sy = layout.hand_slot_origin(0)
    assert pointer.pointer_down(sx + 3, sy + 3)
    assert pointer.is_dragging
    pointer.pointer_move(*_cell_centre(layout, 4, 4))
    piece, x, y, clears = pointer.ghost()
    assert (x, y) == (4, 4) and clears is not None and not clears
    result = pointer.pointer_up(*_cell_centre(layout, 4, 4))
    assert result.accepted
    assert game.grid.cells[4, 4] == 1
    assert not pointer.is_dragging


def test_drop_off_board_is_rejected_without_change(game):
    layout = Layout()
    pointer = PointerInput(game, layout)
    game.hand = hand_of(ShapeKind.DOT, None, None)
    sx, sy = layout.hand_slot_origin(0)
    pointer.pointer_down(sx + 3, sy + 3)
    gx, gy = layout.grid_offset
    result = pointer.pointer_up(gx - layout.cell_size * 2, gy)
    assert result is not None and not result.accepted
    assert game.grid.filled_count() == 0
    assert game.hand[0] is not None


def test_no_drag_while_animating(game):
    layout = Layout()
    pointer = PointerInput(game, layout)
    game.hand = hand_of(ShapeKind.DOT, ShapeKind.DOT, None)
    game.grid.cells[0, :8] = 1
    game.place_piece(0, 8, 0)
    assert game.is_animating
    sx, sy = layout.hand_slot_origin(1)
    assert not pointer.pointer_down(sx + 3, sy + 3)


def test_fit_shrinks_cells_for_small_window():
    layout = Layout()
    layout.fit(400, 600)
    assert layout.cell_size * 9 <= 400 - 2 * layout.margin
