"""
Local backup for scores that could not reach the leaderboard.

Failed submissions go to a pending list that ``LeaderboardWorker`` retries on
a fixed interval; every backed-up score is also kept so the local leaderboard
can show it until the server has it. Not thread-safe: one worker thread owns it.
"""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .client import LeaderboardClient, LeaderboardError

logger = logging.getLogger(__name__)

PENDING_SCORES_KEY = "blockudoku-pending-scores"
BACKUP_SCORES_KEY = "blockudoku-backup-scores"


class ScoreBackupQueue:
    def __init__(self, path: str, client: LeaderboardClient) -> None:
        self.path = path
        self.client = client

    # Storage

    def _read(self) -> Dict[str, List[Dict[str, Any]]]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.error("Failed to read score backup %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, List[Dict[str, Any]]]) -> bool:
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
        except OSError as exc:
            logger.error("Failed to write score backup %s: %s", self.path, exc)
            return False
        return True

    def pending_scores(self) -> List[Dict[str, Any]]:
        return list(self._read().get(PENDING_SCORES_KEY, []))

    def backup_scores(self) -> List[Dict[str, Any]]:
        return list(self._read().get(BACKUP_SCORES_KEY, []))

    @property
    def pending_count(self) -> int:
        return len(self.pending_scores())

    def save_to_backup(self, username: str, score: int) -> bool:
        entry = {
            "id": int(time.time() * 1000),
            "username": username,
            "score": int(score),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        data = self._read()
        data.setdefault(PENDING_SCORES_KEY, []).append(entry)
        data.setdefault(BACKUP_SCORES_KEY, []).append(entry)
        saved = self._write(data)
        if saved:
            logger.info("Score saved to local backup: %s %d", username, score)
        return saved

    # Sync

    def submit(self, username: str, score: int) -> Optional[int]:
        """Submit now; on a retryable failure queue the score and return None."""
        try:
            return self.client.submit_score(username, score)
        except LeaderboardError as exc:
            if not exc.retryable:
                raise
            logger.warning("Leaderboard unavailable (%s), keeping score locally", exc)
            self.save_to_backup(username, score)
            return None

    def sync_pending(self) -> bool:
        """Resend pending scores; only the ones that fail again stay queued."""
        pending = self.pending_scores()
        if not pending:
            return True
        failed: List[Dict[str, Any]] = []
        synced = 0
        for entry in pending:
            try:
                self.client.submit_score(entry["username"], entry["score"])
                synced += 1
            except LeaderboardError as exc:
                if exc.retryable:
                    failed.append(entry)
                else:
                    logger.warning("Dropping rejected backup score %s: %s", entry, exc)
        data = self._read()
        if failed:
            data[PENDING_SCORES_KEY] = failed
        else:
            data.pop(PENDING_SCORES_KEY, None)
        self._write(data)
        if failed:
            logger.info("Synced %d scores, %d failed", synced, len(failed))
            return False
        logger.info("Successfully synced %d scores to server", synced)
        return True

    def combined_leaderboard(self, server_scores: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
        """Server scores plus local backups the server does not list, best first."""
        combined = list(server_scores or [])
        server_ids = {s.get("id") for s in combined}
        for entry in self.backup_scores():
            if entry.get("id") not in server_ids:
                combined.append(entry)
        combined.sort(key=lambda s: -int(s.get("score", 0)))
        return combined
