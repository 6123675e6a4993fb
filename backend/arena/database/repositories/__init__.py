"""Repository interfaces and their SQL / in-memory implementations."""

from arena.database.repositories.base import (
    AgentRepository,
    LedgerStore,
    LedgerUnit,
    MatchRepository,
    PredictionRepository,
)
from arena.database.repositories.memory import InMemoryLedgerStore
from arena.database.repositories.store import SqlLedgerStore

__all__ = [
    "AgentRepository",
    "InMemoryLedgerStore",
    "LedgerStore",
    "LedgerUnit",
    "MatchRepository",
    "PredictionRepository",
    "SqlLedgerStore",
]
