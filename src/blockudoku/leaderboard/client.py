from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class LeaderboardError(RuntimeError):
    """Submission or fetch failed; ``retryable`` tells the caller whether to queue it."""

    def __init__(self, message: str, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable


class LeaderboardClient:
    def __init__(self, base_url: str = "http://127.0.0.1:8000", timeout: float = 5.0,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)
        self.session = session or requests.Session()

    def submit_score(self, username: str, score: int) -> int:
        """POST a score and return its rank."""
        try:
            response = self.session.post(
                f"{self.base_url}/api/score",
                json={"username": username, "score": int(score)},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise LeaderboardError(f"score submission failed: {exc}") from exc

        body = self._json(response)
        if response.status_code >= 400 or not body.get("success"):
            # 4xx means the payload itself was refused; resending will not help
            retryable = response.status_code >= 500 or bool(body.get("retryable"))
            raise LeaderboardError(body.get("error") or f"HTTP {response.status_code}", retryable=retryable)
        return int(body["rank"])

    def fetch_leaderboard(self) -> List[Dict[str, Any]]:
        try:
            response = self.session.get(f"{self.base_url}/api/leaderboard", timeout=self.timeout)
        except requests.RequestException as exc:
            raise LeaderboardError(f"leaderboard fetch failed: {exc}") from exc
        body = self._json(response)
        if response.status_code >= 400 or not body.get("success"):
            raise LeaderboardError(body.get("error") or f"HTTP {response.status_code}")
        return list(body.get("data") or [])

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
