from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockudoku.game import BlockudokuGame, GameConfig, ShapeKind


def compute_action_mask(game: BlockudokuGame) -> np.ndarray:
    size = game.grid.size
    k = game.config.hand_size
    mask = np.zeros((k, size, size), dtype=np.bool_)
    for piece_idx, x, y in game.get_valid_actions():
        mask[piece_idx, y, x] = True
    return mask


class BlockudokuEnv(gym.Env):
    """Headless Blockudoku episode.

    Action is ``(piece_idx, x, y)``. Clear animations are run to completion
    inside :meth:`step`, so every observation is a settled grid.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        points_scale: float = 0.01,
        invalid_action_penalty: float = -0.1,
        terminal_penalty: float = 0.0,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.game = BlockudokuGame(config)
        self.render_mode = render_mode
        self.points_scale = float(points_scale)
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)

        size = self.game.config.grid_size
        k = self.game.config.hand_size
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=len(ShapeKind) - 1, shape=(k,), dtype=np.int8),
                "pieces_remaining": spaces.Discrete(k + 1),
            }
        )
        self.action_space = spaces.MultiDiscrete((k, size, size))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "grid": self.game.grid.clone_state(),
            "pieces": self.game.hand_kinds(),
            "pieces_remaining": sum(p is not None for p in self.game.hand),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": compute_action_mask(self.game),
            "valid_actions": self.game.get_valid_actions(),
            "score": self.game.score,
            "streak": self.game.streak,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        piece_idx, x, y = map(int, action)
        result = self.game.place_piece(piece_idx, x, y)
        self.game.finish_animation()
        self._steps += 1

        reward_components: Dict[str, float] = {}
        if result.accepted:
            reward_components["points"] = self.points_scale * float(result.points)
        else:
            reward_components["invalid"] = self.invalid_action_penalty
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = result.points
        info["clears"] = result.clears.count
        return self._get_obs(), float(sum(reward_components.values())), terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.game.grid.cells
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                color = (70, 200, 120) if grid[y, x] else (30, 30, 36)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
