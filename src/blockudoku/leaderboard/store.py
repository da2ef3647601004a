"""
Score persistence for the leaderboard: a flat JSON file or a SQLite table.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from .config import DEFAULT_TOP_N, LeaderboardSettings
from .models import ScoreEntry

logger = logging.getLogger(__name__)


class ScoreStoreError(RuntimeError):
    """The backing store could not be read or written."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScoreStore:
    def add(self, username: str, score: int) -> ScoreEntry:
        raise NotImplementedError

    def rank_of(self, score: int) -> int:
        """1 + number of stored scores strictly greater than ``score``."""
        raise NotImplementedError

    def top(self, limit: int = DEFAULT_TOP_N) -> List[ScoreEntry]:
        """Highest scores first; equal scores keep submission order."""
        raise NotImplementedError


class JsonFileScoreStore(ScoreStore):
    """All scores in one JSON array.

    A file that exists but cannot be parsed is never overwritten: every
    operation raises ``ScoreStoreError`` until it is repaired by hand.
    Writes go through a temporary file in the same directory and
    ``os.replace``, so readers see either the old or the new array.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._last_id = 0

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                parsed = json.load(fh)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            logger.error("Unreadable scores file %s: %s", self.path, exc)
            raise ScoreStoreError(f"could not read {self.path}: {exc}") from exc
        if not isinstance(parsed, list):
            logger.error("Scores file %s does not hold a list", self.path)
            raise ScoreStoreError(f"{self.path} does not hold a list of scores")
        return parsed

    def _write(self, rows: List[Dict[str, Any]]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".scores-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(rows, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as exc:
            raise ScoreStoreError(f"could not write {self.path}: {exc}") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _next_id(self, rows: List[Dict[str, Any]]) -> int:
        # millisecond timestamps, bumped so ids stay unique and increasing
        candidate = int(time.time() * 1000)
        highest = max([self._last_id] + [int(r.get("id", 0)) for r in rows])
        self._last_id = max(candidate, highest + 1)
        return self._last_id

    def add(self, username: str, score: int) -> ScoreEntry:
        with self._lock:
            rows = self._read()
            entry = ScoreEntry(id=self._next_id(rows), username=username, score=score, timestamp=_now_iso())
            rows.append(entry.model_dump())
            self._write(rows)
        return entry

    def rank_of(self, score: int) -> int:
        rows = self._read()
        return sum(1 for r in rows if int(r.get("score", 0)) > score) + 1

    def top(self, limit: int = DEFAULT_TOP_N) -> List[ScoreEntry]:
        rows = self._read()
        # ids grow with submission time, so they break ties
        rows.sort(key=lambda r: (-int(r.get("score", 0)), int(r.get("id", 0))))
        return [ScoreEntry(**r) for r in rows[:limit]]


class SqliteScoreStore(ScoreStore):
    def __init__(self, path: str = "scores.db") -> None:
        self.path = path
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._init_schema()
        except sqlite3.Error as exc:
            raise ScoreStoreError(f"could not open {self.path}: {exc}") from exc

    def _init_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS scores (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username VARCHAR(20) NOT NULL,
                score INTEGER NOT NULL CHECK (score >= 0),
                created_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_scores_score ON scores (score DESC, created_at ASC);
            """
        )
        self._conn.commit()

    def add(self, username: str, score: int) -> ScoreEntry:
        created_at = _now_iso()
        with self._lock:
            try:
                cursor = self._conn.execute(
                    "INSERT INTO scores (username, score, created_at) VALUES (?, ?, ?)",
                    (username, score, created_at),
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                raise ScoreStoreError(f"could not save score: {exc}") from exc
        return ScoreEntry(id=int(cursor.lastrowid), username=username, score=score, timestamp=created_at)

    def rank_of(self, score: int) -> int:
        with self._lock:
            try:
                row = self._conn.execute("SELECT COUNT(*) FROM scores WHERE score > ?", (score,)).fetchone()
            except sqlite3.Error as exc:
                raise ScoreStoreError(f"could not rank score: {exc}") from exc
        return int(row[0]) + 1

    def top(self, limit: int = DEFAULT_TOP_N) -> List[ScoreEntry]:
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT id, username, score, created_at FROM scores ORDER BY score DESC, created_at ASC, id ASC LIMIT ?",
                    (limit,),
                ).fetchall()
            except sqlite3.Error as exc:
                raise ScoreStoreError(f"could not read leaderboard: {exc}") from exc
        return [ScoreEntry(id=r[0], username=r[1], score=r[2], timestamp=r[3]) for r in rows]

    def close(self) -> None:
        self._conn.close()


def store_from_settings(settings: LeaderboardSettings) -> ScoreStore:
    if settings.uses_sqlite:
        logger.info("Using sqlite score store at %s", settings.db_path)
        return SqliteScoreStore(settings.db_path)
    logger.info("Using JSON score store at %s", settings.scores_file)
    return JsonFileScoreStore(settings.scores_file)
