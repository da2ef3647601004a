"""
FastAPI application for the Blockudoku leaderboard.

POST /api/score        submit {username, score}, returns the 1-based rank
GET  /api/leaderboard  top scores, highest first
GET  /health
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import LeaderboardSettings
from .models import ErrorResponse, LeaderboardResponse, ScoreSubmission, SubmitResponse
from .store import ScoreStore, ScoreStoreError, store_from_settings

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, retryable: Optional[bool] = None) -> JSONResponse:
    payload = ErrorResponse(error=message, retryable=retryable)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def _first_error_message(exc: ValidationError) -> str:
    err = exc.errors()[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    field = ".".join(str(p) for p in err.get("loc", ())) or "body"
    return f"{field}: {err.get('msg', 'invalid value')}"


def create_app(store: Optional[ScoreStore] = None, settings: Optional[LeaderboardSettings] = None) -> FastAPI:
    settings = settings or LeaderboardSettings.from_env()
    if store is None:
        store = store_from_settings(settings)

    app = FastAPI(title="Blockudoku Leaderboard", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.store = store
    app.state.settings = settings

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True, "store": type(store).__name__}

    @app.post("/api/score", status_code=201, response_model=SubmitResponse)
    def submit_score(payload: Any = Body(None)):
        if not isinstance(payload, dict):
            return _error(400, "Request body must be a JSON object")
        try:
            submission = ScoreSubmission.model_validate(payload)
        except ValidationError as exc:
            return _error(400, _first_error_message(exc))

        try:
            entry = store.add(submission.username, submission.score)
            rank = store.rank_of(entry.score)
        except ScoreStoreError as exc:
            logger.error("Error saving score: %s", exc)
            return _error(503, "Failed to save score", retryable=True)

        logger.info("Score %d from %s ranked #%d", entry.score, entry.username, rank)
        return SubmitResponse(rank=rank)

    @app.get("/api/leaderboard", response_model=LeaderboardResponse)
    def leaderboard():
        try:
            data = store.top(settings.top_n)
        except ScoreStoreError as exc:
            logger.error("Error fetching leaderboard: %s", exc)
            return _error(503, "Failed to fetch leaderboard", retryable=True)
        return LeaderboardResponse(data=data)

    return app
