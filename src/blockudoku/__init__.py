"""Blockudoku: Sudoku grid, Tetris-style pieces."""

__version__ = "0.1.0"
