"""Game module for Blockudoku.

Exports the core game engine and supporting classes:
- ShapeKind, Piece, PieceGenerator: piece catalogue and hand generation
- GameGrid, ClearSet: 9x9 grid with row, column and box clearing
- ScoringRules, ScoreManager: turn scoring with combo and streak bonuses
- BlockudokuGame: turn controller with the clear animation state machine
"""

from .pieces import SHAPES, SMALL_KINDS, Piece, PieceGenerator, ShapeKind
from .grid import ClearSet, GameGrid, InvalidPlacementError
from .scoring import ScoreManager, ScoringRules
from .storage import HighScoreStore, JsonHighScoreStore, JsonSettingsFile, MemoryHighScoreStore, ThemePreference
from .core import BlockudokuGame, GameConfig, GameEvent, TurnResult, TurnState

__all__ = [
    "SHAPES",
    "SMALL_KINDS",
    "Piece",
    "PieceGenerator",
    "ShapeKind",
    "ClearSet",
    "GameGrid",
    "InvalidPlacementError",
    "ScoreManager",
    "ScoringRules",
    "HighScoreStore",
    "JsonHighScoreStore",
    "JsonSettingsFile",
    "MemoryHighScoreStore",
    "ThemePreference",
    "BlockudokuGame",
    "GameConfig",
    "GameEvent",
    "TurnResult",
    "TurnState",
]
