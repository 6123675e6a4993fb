"""
Service wiring.

A Container owns one engine and the services built on it. Engines are bound
to the event loop they were first used on, so every `asyncio.run` (CLI
command, scheduler tick) builds its own container and closes it afterwards;
the API server keeps one for the lifetime of the app.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine

from arena.clock import Clock, SystemClock
from arena.config import Settings
from arena.database import create_engine_from_settings, create_session_factory
from arena.database.repositories import LedgerStore, SqlLedgerStore
from arena.services.ledger_service import LedgerService
from arena.services.match_service import MatchService
from arena.services.odds import OddsEngine
from arena.services.settlement_service import SettlementService, create_settlement_service

logger = logging.getLogger(__name__)


class Container:
    def __init__(
        self,
        settings: Settings,
        store: LedgerStore,
        clock: Clock | None = None,
        engine: AsyncEngine | None = None,
        settlement: SettlementService | None = None,
    ):
        self.settings = settings
        self.store = store
        self.clock = clock or SystemClock()
        self.engine = engine
        odds_engine = OddsEngine(settings.odds)
        self.ledger = LedgerService(
            store,
            clock=self.clock,
            config=settings.ledger,
            odds_engine=odds_engine,
        )
        self.matches = MatchService(
            store,
            clock=self.clock,
            config=settings.ledger,
            odds_engine=odds_engine,
        )
        self._settlement = settlement

    @property
    def settlement(self) -> SettlementService:
        """Built on first use; raises ConfigurationError without an API token."""
        if self._settlement is None:
            self._settlement = create_settlement_service(
                self.settings, self.store, clock=self.clock
            )
        return self._settlement

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.debug("Disposed database engine")


def build_container(settings: Settings) -> Container:
    engine = create_engine_from_settings(settings)
    store = SqlLedgerStore(create_session_factory(engine))
    return Container(settings, store, engine=engine)


@asynccontextmanager
async def open_container(settings: Settings) -> AsyncIterator[Container]:
    container = build_container(settings)
    try:
        yield container
    finally:
        await container.close()
