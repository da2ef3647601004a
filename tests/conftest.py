from __future__ import annotations

import random
from concurrent.futures import Executor, Future
from typing import List, Optional

import pytest

from blockudoku.game import BlockudokuGame, GameConfig, MemoryHighScoreStore, Piece, PieceGenerator, ShapeKind


class RecordingGenerator(PieceGenerator):
    """Hands out a fixed kind and remembers the fill percentage of each batch."""

    def __init__(self, kind: ShapeKind = ShapeKind.DOT) -> None:
        super().__init__(rng=random.Random(0))
        self.kind = kind
        self.batch_fills: List[float] = []

    def generate_batch(self, fill_percentage: float = 0.0, count: int = 3) -> List[Piece]:
        self.batch_fills.append(fill_percentage)
        return [Piece(self.kind) for _ in range(count)]


def hand_of(*kinds: Optional[ShapeKind]) -> List[Optional[Piece]]:
    return [None if k is None else Piece(k) for k in kinds]


@pytest.fixture
def store() -> MemoryHighScoreStore:
    return MemoryHighScoreStore()


@pytest.fixture
def game(store) -> BlockudokuGame:
    return BlockudokuGame(GameConfig(random_seed=1234), store=store)


@pytest.fixture
def recording_game(store):
    generator = RecordingGenerator()
    return BlockudokuGame(GameConfig(), store=store, generator=generator), generator


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        return self._body


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self):
        self.responses = []
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        return self._next()

    def get(self, url, timeout=None):
        return self._next()

    def _next(self):
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class InlineExecutor(Executor):
    """Runs submitted calls immediately, so worker results are ready on the next poll."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future
