"""Match results as seen by settlement, and the fetcher interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, field_validator

from arena.models.enums import PredictionType

FINISHED = "FINISHED"


class MatchResult(BaseModel):
    """Result of one fixture as reported by the results API."""

    api_id: int
    status: str = "SCHEDULED"
    winner: PredictionType | None = None
    home_score: int | None = None
    away_score: int | None = None

    @field_validator("winner", mode="before")
    @classmethod
    def parse_winner(cls, v: Any) -> PredictionType | None:
        if v in (None, ""):
            return None
        return PredictionType(v)

    @property
    def is_final(self) -> bool:
        return self.status == FINISHED and self.winner is not None

    @classmethod
    def from_api(cls, api_id: int, data: dict[str, Any]) -> MatchResult:
        score = data.get("score") or {}
        full_time = score.get("fullTime") or {}
        return cls(
            api_id=data.get("id", api_id),
            status=data.get("status", "SCHEDULED"),
            winner=score.get("winner"),
            home_score=full_time.get("home"),
            away_score=full_time.get("away"),
        )


class ResultFetcher(ABC):
    """Looks up the final result of a fixture by its external id."""

    async def __aenter__(self) -> "ResultFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    @abstractmethod
    async def fetch_result(self, api_id: int) -> MatchResult:
        """
        Raises ExternalServiceError on transport failures or timeouts. Errors
        flagged `fatal` (rejected credentials) stop the settlement run.
        """
