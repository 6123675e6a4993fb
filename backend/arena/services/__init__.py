from .ledger_service import LedgerService
from .match_service import MatchService
from .odds import Odds, OddsEngine
from .results import MatchResult, ResultFetcher
from .settlement_service import (
    FixedDelay,
    RateLimitedIterator,
    SettlementService,
    StatsAccumulator,
    create_settlement_service,
)

__all__ = [
    "LedgerService",
    "MatchService",
    "Odds",
    "OddsEngine",
    "MatchResult",
    "ResultFetcher",
    "FixedDelay",
    "RateLimitedIterator",
    "SettlementService",
    "StatsAccumulator",
    "create_settlement_service",
]
