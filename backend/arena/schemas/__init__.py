"""Pydantic schemas for the transport layer."""

from arena.schemas.bet import (
    AgentCredentials,
    BalanceResponse,
    BetReceipt,
    PlaceBetRequest,
)
from arena.schemas.common import BaseSchema
from arena.schemas.settlement import SettlementReport

__all__ = [
    "AgentCredentials",
    "BalanceResponse",
    "BaseSchema",
    "BetReceipt",
    "PlaceBetRequest",
    "SettlementReport",
]
