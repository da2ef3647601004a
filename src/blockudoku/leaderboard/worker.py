"""
Leaderboard calls kept off the game's frame loop.

Submissions, leaderboard refreshes and the periodic resend of pending scores
all run on one background thread. The frame loop calls
:meth:`LeaderboardWorker.poll` every frame; it never waits on the network,
it only picks up the calls that have already finished.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .backup import ScoreBackupQueue
from .client import LeaderboardError
from .config import DEFAULT_TOP_N

logger = logging.getLogger(__name__)


@dataclass
class SubmitOutcome:
    username: str
    score: int
    rank: Optional[int] = None
    error: Optional[str] = None

    @property
    def queued(self) -> bool:
        """Kept locally for a later resend."""
        return self.error is None and self.rank is None


class LeaderboardWorker:
    def __init__(
        self,
        backup: ScoreBackupQueue,
        executor: Optional[Executor] = None,
        sync_interval: float = 5.0,
        top_n: int = DEFAULT_TOP_N,
    ) -> None:
        self.backup = backup
        self.sync_interval = float(sync_interval)
        self.top_n = top_n
        # a single thread owns the backup file
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="leaderboard")
        self._submit_future: Optional[Future] = None
        self._refresh_future: Optional[Future] = None
        self._sync_future: Optional[Future] = None
        self._last_sync: Optional[float] = None

        self.entries: List[Dict[str, Any]] = []
        self.loaded = False
        self.load_failed = False

    @property
    def submitting(self) -> bool:
        return self._submit_future is not None

    @property
    def loading(self) -> bool:
        return self._refresh_future is not None

    def submit(self, username: str, score: int) -> bool:
        """Queue a submission; False if one is already in flight."""
        if self._submit_future is not None:
            return False
        self._submit_future = self._executor.submit(self._submit, username, int(score))
        return True

    def refresh(self) -> bool:
        if self._refresh_future is not None:
            return False
        self._refresh_future = self._executor.submit(self._load)
        return True

    def poll(self, now: Optional[float] = None) -> Optional[SubmitOutcome]:
        """Collect finished calls and start the periodic sync when it is due.

        Returns the outcome of a submission that finished since the last call.
        """
        now = time.monotonic() if now is None else now
        outcome = None

        if self._submit_future is not None and self._submit_future.done():
            outcome = self._submit_future.result()
            self._submit_future = None
            if outcome.error is None:
                self.refresh()

        if self._refresh_future is not None and self._refresh_future.done():
            self.entries, reached_server = self._refresh_future.result()
            self._refresh_future = None
            self.loaded = True
            self.load_failed = not reached_server

        if self._sync_future is not None and self._sync_future.done():
            self._sync_future.result()
            self._sync_future = None

        if self._sync_future is None and (self._last_sync is None or now - self._last_sync >= self.sync_interval):
            self._last_sync = now
            self._sync_future = self._executor.submit(self.backup.sync_pending)

        return outcome

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # Worker thread

    def _submit(self, username: str, score: int) -> SubmitOutcome:
        try:
            rank = self.backup.submit(username, score)
        except LeaderboardError as exc:
            return SubmitOutcome(username, score, error=str(exc))
        return SubmitOutcome(username, score, rank=rank)

    def _load(self) -> Tuple[List[Dict[str, Any]], bool]:
        try:
            server_scores = self.backup.client.fetch_leaderboard()
            reached_server = True
        except LeaderboardError as exc:
            logger.warning("Error loading leaderboard: %s", exc)
            server_scores, reached_server = [], False
        return self.backup.combined_leaderboard(server_scores)[: self.top_n], reached_server
