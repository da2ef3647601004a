"""Leaderboard service (FastAPI) and its client with offline backup."""

from .config import LeaderboardSettings
from .store import JsonFileScoreStore, ScoreStore, ScoreStoreError, SqliteScoreStore
from .client import LeaderboardClient, LeaderboardError
from .backup import ScoreBackupQueue
from .worker import LeaderboardWorker, SubmitOutcome

__all__ = [
    "LeaderboardSettings",
    "JsonFileScoreStore",
    "ScoreStore",
    "ScoreStoreError",
    "SqliteScoreStore",
    "LeaderboardClient",
    "LeaderboardError",
    "ScoreBackupQueue",
    "LeaderboardWorker",
    "SubmitOutcome",
]
