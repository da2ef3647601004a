"""
Runtime settings for the leaderboard service, read from the environment.

LEADERBOARD_DB_PATH      sqlite database file; when set it wins over the JSON file
LEADERBOARD_SCORES_FILE  flat JSON file of scores (default: db/scores.json)
LEADERBOARD_TOP_N        entries returned by GET /api/leaderboard (default: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_SCORES_FILE = os.path.join("db", "scores.json")
DEFAULT_TOP_N = 10
MAX_USERNAME_LENGTH = 20


@dataclass
class LeaderboardSettings:
    db_path: Optional[str] = None
    scores_file: str = DEFAULT_SCORES_FILE
    top_n: int = DEFAULT_TOP_N

    @property
    def uses_sqlite(self) -> bool:
        return bool(self.db_path)

    @classmethod
    def from_env(cls) -> "LeaderboardSettings":
        db_path = (os.getenv("LEADERBOARD_DB_PATH") or "").strip() or None
        scores_file = (os.getenv("LEADERBOARD_SCORES_FILE") or "").strip() or DEFAULT_SCORES_FILE
        raw_top = (os.getenv("LEADERBOARD_TOP_N") or "").strip()
        try:
            top_n = int(raw_top) if raw_top else DEFAULT_TOP_N
        except ValueError:
            top_n = DEFAULT_TOP_N
        return cls(db_path=db_path, scores_file=scores_file, top_n=max(1, top_n))
