"""
Repository interfaces

Every ledger, lifecycle and settlement operation talks to persistence through
a LedgerStore. A store hands out one LedgerUnit per transaction; the unit's
repositories share that transaction, so everything done inside one
`async with store.transaction()` block commits or rolls back together.

Entities are mutated in place and written on commit.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime

from arena.models import Agent, Match, MatchStatus, Prediction


class AgentRepository(ABC):
    @abstractmethod
    async def get(self, pk: int, for_update: bool = False) -> Agent | None:
        ...

    @abstractmethod
    async def get_by_agent_id(
        self, agent_id: str, for_update: bool = False
    ) -> Agent | None:
        ...

    @abstractmethod
    async def add(self, agent: Agent) -> Agent:
        ...


class MatchRepository(ABC):
    @abstractmethod
    async def get(self, match_id: int, for_update: bool = False) -> Match | None:
        ...

    @abstractmethod
    async def get_by_api_id(
        self, api_id: int, for_update: bool = False
    ) -> Match | None:
        ...

    @abstractmethod
    async def add(self, match: Match) -> Match:
        ...

    @abstractmethod
    async def list_in_window(
        self,
        start: datetime,
        end: datetime,
        status: MatchStatus | None = None,
    ) -> list[Match]:
        """Matches with kickoff in [start, end], ordered by kickoff."""

    @abstractmethod
    async def list_by_status(self, status: MatchStatus) -> list[Match]:
        ...


class PredictionRepository(ABC):
    @abstractmethod
    async def get(self, prediction_id: int) -> Prediction | None:
        ...

    @abstractmethod
    async def add(self, prediction: Prediction) -> Prediction:
        """Persist a new prediction and assign its id."""

    @abstractmethod
    async def list_pending_for_match(
        self, match_id: int, for_update: bool = False
    ) -> list[Prediction]:
        ...

    @abstractmethod
    async def count_for_match(self, match_id: int) -> int:
        ...


@dataclass
class LedgerUnit:
    """Repositories bound to a single transaction."""

    agents: AgentRepository
    matches: MatchRepository
    predictions: PredictionRepository


class LedgerStore(ABC):
    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[LedgerUnit]:
        """Open a transaction; commit on clean exit, roll back on exception."""
