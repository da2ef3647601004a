from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np

from .grid import ClearSet, GameGrid
from .pieces import Piece, PieceGenerator
from .scoring import ScoreManager, ScoringRules
from .storage import HighScoreStore

logger = logging.getLogger(__name__)


class TurnState(Enum):
    IDLE = "idle"
    ANIMATING = "animating"
    GAME_OVER = "game_over"


class GameEvent(Enum):
    RESET = "reset"
    PIECE_PLACED = "piece_placed"
    CLEARS_STARTED = "clears_started"
    CLEARS_APPLIED = "clears_applied"
    HAND_REFILLED = "hand_refilled"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    grid_size: int = 9
    box_size: int = 3
    hand_size: int = 3
    clear_animation_steps: int = 20
    clear_animation_duration_ms: int = 400
    crowded_fill_percentage: float = 82.0
    small_piece_chance: float = 1.0 / 3.0
    random_seed: Optional[int] = None

    @property
    def animation_step_ms(self) -> float:
        return self.clear_animation_duration_ms / max(1, self.clear_animation_steps)


@dataclass
class TurnResult:
    accepted: bool
    piece_index: int
    origin: Tuple[int, int]
    clears: ClearSet = field(default_factory=ClearSet)
    points: int = 0
    animating: bool = False
    hand_refilled: bool = False
    game_over: bool = False


Listener = Callable[["GameEvent", "BlockudokuGame"], None]


class BlockudokuGame:
    """One game session: grid, hand, score and the turn state machine.

    A placement with clears leaves the game in ``ANIMATING``. The frame loop
    then calls :meth:`advance_animation` until it returns True; only then are
    the clears applied, the hand refilled and game over evaluated.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        store: Optional[HighScoreStore] = None,
        generator: Optional[PieceGenerator] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.grid = GameGrid(self.config.grid_size, self.config.box_size)
        self.score_manager = ScoreManager(rules, store)
        self.generator = generator or PieceGenerator(
            rng=random.Random(self.config.random_seed),
            crowded_threshold=self.config.crowded_fill_percentage,
            small_piece_chance=self.config.small_piece_chance,
        )
        self._listeners: List[Listener] = []

        self.hand: List[Optional[Piece]] = []
        self.state = TurnState.IDLE
        self.pending_clears = ClearSet()
        self.animation_step = 0
        self.total_clears = 0
        self.total_pieces_placed = 0
        self.reset()

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # Session lifecycle

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.generator.seed(seed)
        self.grid.reset()
        self.score_manager.reset()
        self.hand = self.generator.generate_batch(0.0, self.config.hand_size)
        self.state = TurnState.IDLE
        self.pending_clears = ClearSet()
        self.animation_step = 0
        self.total_clears = 0
        self.total_pieces_placed = 0
        logger.info("New game started")
        self._emit(GameEvent.RESET)

    @property
    def score(self) -> int:
        return self.score_manager.current_score

    @property
    def high_score(self) -> int:
        return self.score_manager.high_score

    @property
    def streak(self) -> int:
        return self.score_manager.streak

    @property
    def game_over(self) -> bool:
        return self.state is TurnState.GAME_OVER

    @property
    def is_animating(self) -> bool:
        return self.state is TurnState.ANIMATING

    @property
    def animation_progress(self) -> float:
        if not self.is_animating:
            return 0.0
        return min(1.0, self.animation_step / max(1, self.config.clear_animation_steps))

    def get_piece(self, piece_index: int) -> Optional[Piece]:
        if 0 <= piece_index < len(self.hand):
            return self.hand[piece_index]
        return None

    # Turn

    def place_piece(self, piece_index: int, x: int, y: int) -> TurnResult:
        rejected = TurnResult(accepted=False, piece_index=piece_index, origin=(x, y))
        if self.state is not TurnState.IDLE:
            return rejected
        piece = self.get_piece(piece_index)
        if piece is None or not self.grid.can_place(piece, x, y):
            return rejected

        blocks = self.grid.place(piece, x, y)
        clears = self.grid.detect_clears()
        points = self.score_manager.calculate_score(blocks, clears.count)
        self.hand[piece_index] = None
        self.total_pieces_placed += 1
        self.total_clears += clears.count
        logger.debug(
            "Placed %s at (%d, %d): %d clears, +%d points", piece.name, x, y, clears.count, points
        )
        self._emit(GameEvent.PIECE_PLACED)

        result = TurnResult(
            accepted=True, piece_index=piece_index, origin=(x, y), clears=clears, points=points
        )
        if clears:
            self.state = TurnState.ANIMATING
            self.pending_clears = clears
            self.animation_step = 0
            result.animating = True
            self._emit(GameEvent.CLEARS_STARTED)
            return result

        result.hand_refilled, result.game_over = self._finish_turn()
        return result

    def advance_animation(self) -> bool:
        """Advance the clear animation one frame. True once the turn has finished."""
        if not self.is_animating:
            return False
        self.animation_step += 1
        if self.animation_step < self.config.clear_animation_steps:
            return False
        self.grid.apply_clears(self.pending_clears)
        self.pending_clears = ClearSet()
        self.animation_step = 0
        self.state = TurnState.IDLE
        self._emit(GameEvent.CLEARS_APPLIED)
        self._finish_turn()
        return True

    def finish_animation(self) -> None:
        while self.is_animating:
            self.advance_animation()

    def _finish_turn(self) -> Tuple[bool, bool]:
        refilled = False
        if all(p is None for p in self.hand):
            self.hand = self.generator.generate_batch(
                self.grid.filled_percentage(), self.config.hand_size
            )
            refilled = True
            self._emit(GameEvent.HAND_REFILLED)
        if self.check_game_over():
            return refilled, True
        return refilled, False

    def check_game_over(self) -> bool:
        """Enter GAME_OVER if no hand piece fits. Deferred while clears are pending."""
        if self.game_over:
            return True
        if self.is_animating or self.can_place_any_piece():
            return False
        self.state = TurnState.GAME_OVER
        self.score_manager.save_high_score()
        logger.info(
            "Game over: score %d after %d pieces", self.score, self.total_pieces_placed
        )
        self._emit(GameEvent.GAME_OVER)
        return True

    # Queries

    def can_place_any_piece(self) -> bool:
        remaining = [p for p in self.hand if p is not None]
        if not remaining:
            return True
        return any(self.grid.fits_anywhere(p) for p in remaining)

    def preview(self, piece_index: int, x: int, y: int) -> Optional[ClearSet]:
        piece = self.get_piece(piece_index)
        if piece is None:
            return None
        return self.grid.preview_clears(piece, x, y)

    def get_valid_actions(self) -> List[Tuple[int, int, int]]:
        """List of (piece_index, x, y) placements legal right now."""
        actions: List[Tuple[int, int, int]] = []
        for piece_index, piece in enumerate(self.hand):
            if piece is None:
                continue
            for x, y in self.grid.valid_origins(piece):
                actions.append((piece_index, x, y))
        return actions

    def get_state(self) -> dict:
        return {
            "grid": self.grid.clone_state(),
            "hand": [None if p is None else p.kind.name for p in self.hand],
            "pieces_remaining": sum(p is not None for p in self.hand),
            "score": self.score,
            "high_score": self.high_score,
            "streak": self.streak,
            "state": self.state.value,
            "game_over": self.game_over,
            "filled_percentage": self.grid.filled_percentage(),
        }

    def get_game_stats(self) -> dict:
        return {
            "final_score": self.score,
            "high_score": self.high_score,
            "pieces_placed": self.total_pieces_placed,
            "clears": self.total_clears,
            "final_fill_percentage": self.grid.filled_percentage(),
            "avg_score_per_piece": self.score / max(1, self.total_pieces_placed),
        }

    def hand_kinds(self) -> np.ndarray:
        kinds = np.full((self.config.hand_size,), -1, dtype=np.int8)
        for i, piece in enumerate(self.hand[: self.config.hand_size]):
            if piece is not None:
                kinds[i] = int(piece.kind)
        return kinds
