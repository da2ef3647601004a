"""Gymnasium environments for Blockudoku."""

from __future__ import annotations

from gymnasium.envs.registration import register

register(
    id="Blockudoku-9x9-v0",
    entry_point="blockudoku.env.blockudoku_env:BlockudokuEnv",
)

__all__ = ["Blockudoku-9x9-v0"]
