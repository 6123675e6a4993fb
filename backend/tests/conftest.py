"""Shared fixtures: pinned clock, in-memory store, fake results API."""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from arena.clock import FixedClock
from arena.config import Settings
from arena.database.repositories import InMemoryLedgerStore
from arena.models import Agent, Match, MatchStatus, Prediction, PredictionStatus, PredictionType
from arena.services.ledger_service import LedgerService
from arena.services.match_service import MatchService
from arena.services.results import MatchResult, ResultFetcher
from arena.services.settlement_service import FixedDelay, SettlementService

# Tuesday; the previous settlement week is Mon 2026-02-02 .. Sun 2026-02-08.
NOW = datetime(2026, 2, 10, 5, 0, tzinfo=timezone.utc)


class Seeder:
    """Writes fixtures through the store's own transactions."""

    def __init__(self, store: InMemoryLedgerStore):
        self.store = store
        self._next_api_id = 1000

    async def agent(
        self,
        agent_id: str = "agent-1",
        secret_key: str = "s3cret",
        balance: Decimal = Decimal("10000"),
        name: str | None = None,
    ) -> Agent:
        async with self.store.transaction() as uow:
            return await uow.agents.add(
                Agent(
                    agent_id=agent_id,
                    secret_key=secret_key,
                    name=name or agent_id.title(),
                    balance=balance,
                )
            )

    async def match(
        self,
        kickoff: datetime,
        status: MatchStatus = MatchStatus.BETTING_OPEN,
        api_id: int | None = None,
        home_team: str = "Arsenal",
        away_team: str = "Chelsea",
    ) -> Match:
        if api_id is None:
            self._next_api_id += 1
            api_id = self._next_api_id
        async with self.store.transaction() as uow:
            return await uow.matches.add(
                Match(
                    api_id=api_id,
                    home_team=home_team,
                    away_team=away_team,
                    utc_date=kickoff,
                    status=status,
                )
            )

    async def prediction(
        self,
        agent: Agent,
        match: Match,
        prediction: PredictionType,
        amount: str,
        odd: str,
    ) -> Prediction:
        async with self.store.transaction() as uow:
            return await uow.predictions.add(
                Prediction(
                    agent_id=agent.id,
                    match_id=match.id,
                    prediction=prediction,
                    bet_amount=Decimal(amount),
                    bet_odd=Decimal(odd),
                    status=PredictionStatus.PENDING,
                    confidence=60,
                    summary="test",
                    key_points=["form"],
                )
            )


class FakeFetcher(ResultFetcher):
    """Serves canned results; unknown fixtures come back SCHEDULED."""

    def __init__(self):
        self.results: dict[int, MatchResult] = {}
        self.errors: dict[int, Exception] = {}
        self.calls: list[int] = []
        self.entered = 0

    async def __aenter__(self) -> "FakeFetcher":
        self.entered += 1
        return self

    def finish(
        self,
        api_id: int,
        winner: PredictionType | None,
        home: int = 0,
        away: int = 0,
    ) -> None:
        self.results[api_id] = MatchResult(
            api_id=api_id,
            status="FINISHED",
            winner=winner,
            home_score=home,
            away_score=away,
        )

    async def fetch_result(self, api_id: int) -> MatchResult:
        self.calls.append(api_id)
        if api_id in self.errors:
            raise self.errors[api_id]
        return self.results.get(api_id, MatchResult(api_id=api_id, status="SCHEDULED"))


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


def _settings(**overrides) -> Settings:
    values = {
        "environment": "development",
        "database_url": "sqlite+aiosqlite:///:memory:",
        "football_data_api_token": "",
        "logfire_token": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def make_settings():
    return _settings


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def seed(store) -> Seeder:
    return Seeder(store)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def ledger(store, clock) -> LedgerService:
    return LedgerService(store, clock=clock)


@pytest.fixture
def match_service(store, clock) -> MatchService:
    return MatchService(store, clock=clock)


@pytest.fixture
def settlement(store, fetcher, clock, sleeper) -> SettlementService:
    return SettlementService(
        store,
        fetcher,
        clock=clock,
        delay=FixedDelay(6.0, sleep=sleeper),
    )


@pytest.fixture
def kickoff_tomorrow() -> datetime:
    return NOW + timedelta(days=1)


@pytest.fixture
def last_week_kickoff() -> datetime:
    return datetime(2026, 2, 7, 15, 0, tzinfo=timezone.utc)
