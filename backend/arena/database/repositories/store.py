"""SQLAlchemy-backed LedgerStore."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arena.database.repositories.agents import SqlAgentRepository
from arena.database.repositories.base import LedgerStore, LedgerUnit
from arena.database.repositories.matches import SqlMatchRepository
from arena.database.repositories.predictions import SqlPredictionRepository


class SqlLedgerStore(LedgerStore):
    """
    One AsyncSession per transaction.

    Rows read with for_update=True are locked until commit, which serializes
    concurrent bets on the same agent or match.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[LedgerUnit]:
        async with self.session_factory() as session:
            async with session.begin():
                yield LedgerUnit(
                    agents=SqlAgentRepository(session),
                    matches=SqlMatchRepository(session),
                    predictions=SqlPredictionRepository(session),
                )
