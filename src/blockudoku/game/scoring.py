from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .storage import HighScoreStore, MemoryHighScoreStore

logger = logging.getLogger(__name__)


@dataclass
class ScoringRules:
    points_per_block: int = 10
    points_per_clear: int = 100
    combo_bonus: int = 50
    streak_bonus: int = 25
    streak_threshold: int = 3

    def points_for(self, blocks_placed: int, clear_count: int, streak: int = 0) -> int:
        """Points for one turn. ``streak`` already counts this turn."""
        points = blocks_placed * self.points_per_block
        if clear_count <= 0:
            return points
        points += clear_count * self.points_per_clear
        if clear_count >= 2:
            points += (clear_count - 1) * self.combo_bonus
        if streak >= self.streak_threshold:
            points += streak * self.streak_bonus
        return points


class ScoreManager:
    """Running score, clearing streak and persisted high score."""

    def __init__(self, rules: Optional[ScoringRules] = None, store: Optional[HighScoreStore] = None) -> None:
        self.rules = rules or ScoringRules()
        self.store = store or MemoryHighScoreStore()
        self.current_score = 0
        self.high_score = self.store.load()
        self.streak = 0

    def reset(self) -> None:
        self.current_score = 0
        self.streak = 0

    def calculate_score(self, blocks_placed: int, clear_count: int) -> int:
        """Score one turn and return the points earned by it alone."""
        if clear_count > 0:
            self.streak += 1
        else:
            self.streak = 0
        points = self.rules.points_for(blocks_placed, clear_count, self.streak)
        self.current_score += points
        self.save_high_score()
        return points

    def save_high_score(self) -> bool:
        if self.current_score > self.high_score:
            self.high_score = self.current_score
            self.store.save(self.high_score)
            logger.debug("New high score %d", self.high_score)
            return True
        return False
