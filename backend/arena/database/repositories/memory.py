"""
In-memory LedgerStore

Keeps entities in dictionaries and serializes transactions with a single
asyncio.Lock. Column values are snapshotted when a transaction opens and
restored if it raises, so a failed operation leaves no trace. Used by the
test suite and for local dry runs.
"""

import asyncio
import itertools
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Generic, TypeVar

from arena.database.repositories.base import (
    AgentRepository,
    LedgerStore,
    LedgerUnit,
    MatchRepository,
    PredictionRepository,
)
from arena.models import Agent, Match, MatchStatus, Prediction, PredictionStatus
from arena.utils.time_utils import ensure_utc

T = TypeVar("T")


def _apply_column_defaults(entity) -> None:
    """Fill Python-side column defaults the way a flush would."""
    for column in type(entity).__table__.columns:
        if getattr(entity, column.key) is not None or column.default is None:
            continue
        default = column.default
        value = default.arg(None) if default.is_callable else default.arg
        setattr(entity, column.key, value)


class _Table(dict, Generic[T]):
    def __init__(self):
        super().__init__()
        self._ids = itertools.count(1)

    def insert(self, entity: T) -> T:
        _apply_column_defaults(entity)
        if entity.id is None:
            entity.id = next(self._ids)
        self[entity.id] = entity
        return entity


class InMemoryAgentRepository(AgentRepository):
    def __init__(self, table: _Table[Agent]):
        self.table = table

    async def get(self, pk: int, for_update: bool = False) -> Agent | None:
        return self.table.get(pk)

    async def get_by_agent_id(
        self, agent_id: str, for_update: bool = False
    ) -> Agent | None:
        return next((a for a in self.table.values() if a.agent_id == agent_id), None)

    async def add(self, agent: Agent) -> Agent:
        return self.table.insert(agent)


class InMemoryMatchRepository(MatchRepository):
    def __init__(self, table: _Table[Match]):
        self.table = table

    async def get(self, match_id: int, for_update: bool = False) -> Match | None:
        return self.table.get(match_id)

    async def get_by_api_id(
        self, api_id: int, for_update: bool = False
    ) -> Match | None:
        return next((m for m in self.table.values() if m.api_id == api_id), None)

    async def add(self, match: Match) -> Match:
        return self.table.insert(match)

    async def list_in_window(
        self,
        start: datetime,
        end: datetime,
        status: MatchStatus | None = None,
    ) -> list[Match]:
        matches = [
            m
            for m in self.table.values()
            if start <= ensure_utc(m.utc_date) <= end
            and (status is None or m.status == status)
        ]
        return sorted(matches, key=lambda m: (ensure_utc(m.utc_date), m.id))

    async def list_by_status(self, status: MatchStatus) -> list[Match]:
        matches = [m for m in self.table.values() if m.status == status]
        return sorted(matches, key=lambda m: ensure_utc(m.utc_date))


class InMemoryPredictionRepository(PredictionRepository):
    def __init__(self, table: _Table[Prediction]):
        self.table = table

    async def get(self, prediction_id: int) -> Prediction | None:
        return self.table.get(prediction_id)

    async def add(self, prediction: Prediction) -> Prediction:
        return self.table.insert(prediction)

    async def list_pending_for_match(
        self, match_id: int, for_update: bool = False
    ) -> list[Prediction]:
        return [
            p
            for p in sorted(self.table.values(), key=lambda p: p.id)
            if p.match_id == match_id and p.status == PredictionStatus.PENDING
        ]

    async def count_for_match(self, match_id: int) -> int:
        return sum(1 for p in self.table.values() if p.match_id == match_id)


class InMemoryLedgerStore(LedgerStore):
    def __init__(self):
        self.agents: _Table[Agent] = _Table()
        self.matches: _Table[Match] = _Table()
        self.predictions: _Table[Prediction] = _Table()
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[LedgerUnit]:
        async with self._lock:
            snapshot = self._snapshot()
            try:
                yield LedgerUnit(
                    agents=InMemoryAgentRepository(self.agents),
                    matches=InMemoryMatchRepository(self.matches),
                    predictions=InMemoryPredictionRepository(self.predictions),
                )
            except BaseException:
                self._restore(snapshot)
                raise

    def _tables(self) -> list[_Table]:
        return [self.agents, self.matches, self.predictions]

    def _snapshot(self) -> list[dict[int, tuple[object, dict]]]:
        return [
            {
                pk: (entity, {c.key: getattr(entity, c.key) for c in entity.__table__.columns})
                for pk, entity in table.items()
            }
            for table in self._tables()
        ]

    def _restore(self, snapshot: list[dict[int, tuple[object, dict]]]) -> None:
        for table, saved in zip(self._tables(), snapshot):
            table.clear()
            for pk, (entity, values) in saved.items():
                for key, value in values.items():
                    setattr(entity, key, value)
                table[pk] = entity
