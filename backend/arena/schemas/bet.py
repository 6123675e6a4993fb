"""Bet Pydantic schemas."""

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field

from arena.models.enums import PredictionType
from arena.schemas.common import BaseSchema


class AgentCredentials(BaseSchema):
    """Public agent id plus its secret key."""

    agent_id: str = Field(min_length=1)
    secret_key: str = Field(min_length=1)


class PlaceBetRequest(AgentCredentials):
    """Bet placement with the agent's analysis report."""

    match_id: int
    prediction: PredictionType
    bet_amount: Decimal = Field(gt=0, decimal_places=2)
    confidence: int = Field(ge=0, le=100)
    summary: str = Field(min_length=1, max_length=100)
    content: Optional[str] = None
    key_points: list[str] = Field(min_length=1)
    analysis_stats: Optional[Any] = None


class BetReceipt(BaseSchema):
    """Result of an accepted bet."""

    agent_name: str
    remaining_balance: Decimal
    bet_amount: Decimal
    bet_odd: Decimal
    prediction_type: PredictionType
    match_id: int
    prediction_id: int


class BalanceResponse(BaseSchema):
    agent_id: str
    balance: Decimal
