import random

import numpy as np
import pytest

from blockudoku.game import SHAPES, SMALL_KINDS, Piece, PieceGenerator, ShapeKind


def test_catalogue_has_25_shapes_of_one_to_five_blocks():
    assert len(ShapeKind) == 25
    assert set(SHAPES) == set(ShapeKind)
    for kind in ShapeKind:
        piece = Piece(kind)
        assert 1 <= piece.block_count <= 5, kind
        assert piece.block_count == int(np.sum(piece.shape))
        assert (piece.height, piece.width) == piece.shape.shape
        assert set(np.unique(piece.shape)) <= {0, 1}


def test_shapes_are_read_only():
    shape = Piece(ShapeKind.SQUARE).shape
    assert not shape.flags.writeable


def test_small_kinds_are_the_one_and_two_block_pieces():
    small = {k for k in ShapeKind if Piece(k).block_count <= 2}
    assert small == set(SMALL_KINDS)


def test_piece_dimensions_and_cells():
    piece = Piece(ShapeKind.L_LARGE)
    assert (piece.width, piece.height) == (2, 3)
    assert piece.block_count == 4
    assert piece.cells() == [(0, 0), (0, 1), (0, 2), (1, 2)]
    assert piece.cells_at(3, 5) == [(3, 5), (3, 6), (3, 7), (4, 7)]


def test_pieces_compare_by_kind():
    assert Piece(ShapeKind.PLUS) == Piece(ShapeKind.PLUS)
    assert Piece(ShapeKind.PLUS) != Piece(ShapeKind.DOT)


def test_crowded_grid_always_small_when_chance_is_one():
    gen = PieceGenerator(rng=random.Random(3), small_piece_chance=1.0)
    kinds = {gen.next(90.0).kind for _ in range(100)}
    assert kinds <= set(SMALL_KINDS)


def test_default_small_piece_share_on_crowded_grid():
    gen = PieceGenerator(rng=random.Random(2024))
    draws = 20000
    crowded = sum(gen.next(90.0).kind in SMALL_KINDS for _ in range(draws)) / draws
    relaxed = sum(gen.next(50.0).kind in SMALL_KINDS for _ in range(draws)) / draws
    # biased draw, or an ordinary catalogue draw that happens to be small
    assert crowded == pytest.approx(1 / 3 + (2 / 3) * (3 / 25), abs=0.02)
    assert relaxed == pytest.approx(3 / 25, abs=0.02)


def test_threshold_is_strict():
    gen = PieceGenerator(rng=random.Random(3), small_piece_chance=1.0)
    kinds = {gen.next(82.0).kind for _ in range(200)}
    assert not kinds <= set(SMALL_KINDS)


def test_uncrowded_draws_cover_catalogue():
    gen = PieceGenerator(rng=random.Random(11))
    kinds = {gen.next(10.0).kind for _ in range(2000)}
    assert kinds == set(ShapeKind)


def test_generate_batch_is_three_pieces_and_seedable():
    a = PieceGenerator(rng=random.Random(42)).generate_batch(50.0)
    b = PieceGenerator(rng=random.Random(42)).generate_batch(50.0)
    assert len(a) == 3
    assert a == b
