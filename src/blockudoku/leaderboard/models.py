"""
Pydantic schemas for the leaderboard API.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .config import MAX_USERNAME_LENGTH


class ScoreSubmission(BaseModel):
    """Body of POST /api/score."""
    username: str = Field(None, validate_default=True)
    score: int = Field(None, validate_default=True)

    @field_validator("username", mode="before")
    @classmethod
    def _check_username(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required and must be a string")
        if len(value) > MAX_USERNAME_LENGTH:
            raise ValueError(f"Username must be {MAX_USERNAME_LENGTH} characters or less")
        return value.strip()

    @field_validator("score", mode="before")
    @classmethod
    def _check_score(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValueError("Score must be a non-negative number")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError("Score must be a whole number")
        return int(value)

    model_config = {
        "json_schema_extra": {"example": {"username": "alice", "score": 1240}}
    }


class ScoreEntry(BaseModel):
    """A stored score."""
    id: int
    username: str
    score: int = Field(..., ge=0)
    timestamp: str = Field(description="ISO-8601 submission time (UTC)")


class SubmitResponse(BaseModel):
    success: bool = True
    message: str = "Score submitted successfully"
    rank: int = Field(..., ge=1, description="1 + number of strictly greater scores")


class LeaderboardResponse(BaseModel):
    success: bool = True
    data: List[ScoreEntry] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    retryable: Optional[bool] = None
