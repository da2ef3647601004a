import numpy as np
import pytest

from blockudoku.game import ClearSet, GameGrid, InvalidPlacementError, Piece, ShapeKind


@pytest.fixture
def grid():
    return GameGrid()


@pytest.mark.parametrize("kind", list(ShapeKind))
def test_can_place_rejects_any_cell_outside(grid, kind):
    piece = Piece(kind)
    for x, y in [(-1, 0), (0, -1), (9 - piece.width + 1, 0), (0, 9 - piece.height + 1), (9, 9)]:
        assert not grid.can_place(piece, x, y)
    assert grid.can_place(piece, 9 - piece.width, 9 - piece.height)


def test_can_place_rejects_collision_and_is_pure(grid):
    grid.cells[4, 5] = 1
    before = grid.clone_state()
    assert not grid.can_place(Piece(ShapeKind.LINE_3_H), 3, 4)
    assert grid.can_place(Piece(ShapeKind.LINE_3_H), 6, 4)
    np.testing.assert_array_equal(grid.cells, before)


def test_empty_cells_of_shape_may_overlap_filled_cells(grid):
    # the hole in the corner piece sits over a filled cell
    grid.cells[1, 1] = 1
    assert grid.can_place(Piece(ShapeKind.CORNER_3X3), 0, 0)


def test_place_fills_cells_and_counts(grid):
    placed = grid.place(Piece(ShapeKind.T_SHAPE), 2, 3)
    assert placed == 4
    assert grid.cells[3, 2] == grid.cells[3, 3] == grid.cells[3, 4] == grid.cells[4, 3] == 1
    assert grid.filled_count() == 4


def test_place_out_of_bounds_raises_without_writing(grid):
    with pytest.raises(InvalidPlacementError):
        grid.place(Piece(ShapeKind.LINE_4_H), 7, 0)
    assert grid.filled_count() == 0


def test_detect_clears_on_full_grid(grid):
    grid.cells[:] = 1
    clears = grid.detect_clears()
    assert clears.rows == frozenset(range(9))
    assert clears.cols == frozenset(range(9))
    assert clears.boxes == frozenset((r, c) for r in range(3) for c in range(3))
    assert clears.count == 27


def test_detect_clears_row_column_box(grid):
    grid.cells[2, :] = 1
    grid.cells[:, 7] = 1
    grid.cells[6:9, 0:3] = 1
    clears = grid.detect_clears()
    assert clears.rows == {2}
    assert clears.cols == {7}
    assert clears.boxes == {(2, 0)}


def test_detect_clears_on_speculative_matrix(grid):
    scratch = np.zeros((9, 9), dtype=np.int8)
    scratch[0, :] = 1
    assert grid.detect_clears(scratch).rows == {0}
    assert not grid.detect_clears()


def test_apply_clears_empties_union_once(grid):
    grid.cells[:] = 1
    grid.cells[8, 8] = 0
    clears = grid.detect_clears()
    freed = grid.apply_clears(clears)
    assert freed == len(clears.cells())
    for x, y in clears.cells():
        assert grid.cells[y, x] == 0
    snapshot = grid.clone_state()
    assert grid.apply_clears(clears) == 0
    np.testing.assert_array_equal(grid.cells, snapshot)


def test_overlapping_row_and_box_clear_cells_once(grid):
    grid.cells[0, :] = 1
    grid.cells[0:3, 0:3] = 1
    clears = grid.detect_clears()
    assert clears.count == 2
    assert len(clears.cells()) == 9 + 6
    assert grid.apply_clears(clears) == 15
    assert grid.filled_count() == 0


def test_preview_clears_does_not_mutate(grid):
    grid.cells[0, :8] = 1
    before = grid.clone_state()
    preview = grid.preview_clears(Piece(ShapeKind.DOT), 8, 0)
    assert preview is not None and preview.rows == {0}
    assert grid.preview_clears(Piece(ShapeKind.DOT), 0, 0) is None
    np.testing.assert_array_equal(grid.cells, before)


def test_filled_percentage(grid):
    assert grid.filled_percentage() == 0.0
    grid.cells[0, :] = 1
    assert grid.filled_percentage() == pytest.approx(100.0 * 9 / 81)
    grid.cells[:] = 1
    assert grid.filled_percentage() == 100.0


def test_clear_set_is_falsy_when_empty():
    assert not ClearSet()
    assert ClearSet(rows=frozenset({1}))


def test_valid_origins_and_fits_anywhere(grid):
    assert len(grid.valid_origins(Piece(ShapeKind.DOT))) == 81
    assert len(grid.valid_origins(Piece(ShapeKind.LINE_4_H))) == 6 * 9
    grid.cells[:] = 1
    assert not grid.fits_anywhere(Piece(ShapeKind.DOT))
