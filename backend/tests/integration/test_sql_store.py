"""
End-to-end ledger flow against the SQLAlchemy store.

Runs on a throwaway SQLite file through aiosqlite, so every transaction goes
through a real session, flush and commit.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import InvalidRequestError

from arena.database import create_engine_from_settings, create_session_factory, init_models
from arena.database.repositories import SqlLedgerStore
from arena.errors import StateError, ValidationError
from arena.models import (
    Agent,
    Match,
    MatchStatus,
    Prediction,
    PredictionStatus,
    PredictionType,
)
from arena.schemas import PlaceBetRequest
from arena.services.ledger_service import LedgerService
from arena.services.match_service import MatchService
from arena.services.settlement_service import FixedDelay, SettlementService


def bet(match_id: int, amount: str, secret_key: str, agent_id: str = "sql-agent") -> PlaceBetRequest:
    return PlaceBetRequest(
        agent_id=agent_id,
        secret_key=secret_key,
        match_id=match_id,
        prediction=PredictionType.HOME_TEAM,
        bet_amount=Decimal(amount),
        confidence=55,
        summary="Strong home record",
        key_points=["home record"],
    )


@pytest.fixture
def sql_settings(tmp_path, make_settings):
    return make_settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'arena.db'}")


def test_bet_and_settle_round_trip(sql_settings, clock, fetcher) -> None:
    async def run() -> None:
        engine = create_engine_from_settings(sql_settings)
        try:
            await init_models(engine)
            store = SqlLedgerStore(create_session_factory(engine))
            ledger = LedgerService(store, clock=clock)
            matches = MatchService(store, clock=clock)
            settlement = SettlementService(store, fetcher, clock=clock, delay=FixedDelay(0))

            agent = await ledger.register_agent("sql-agent", "SQL Agent", "secret")
            match = await matches.import_match(
                9001, "Liverpool", "Everton", datetime(2026, 2, 12, 20, 0, tzinfo=timezone.utc)
            )
            assert await matches.open_matches_for_current_week() == 1

            receipt = await ledger.place_bet(bet(match.id, "500", "secret"))
            assert receipt.bet_odd == Decimal("1.98")
            assert receipt.remaining_balance == Decimal("9500")

            with pytest.raises(ValidationError):
                await ledger.place_bet(bet(match.id, "5000", "secret"))

            async with store.transaction() as uow:
                stored = await uow.matches.get(match.id)
                assert stored.pool_home == Decimal("500")
                assert stored.odds_home == Decimal("1.98")
                assert await uow.predictions.count_for_match(match.id) == 1
                assert (await uow.agents.get(agent.id)).balance == Decimal("9500")

            # Next Tuesday: the match now falls in the previous settlement week
            clock.set(datetime(2026, 2, 17, 5, 0, tzinfo=timezone.utc))
            fetcher.finish(9001, PredictionType.HOME_TEAM, 3, 0)

            report = await settlement.run_weekly_settlement()
            assert report.matches_settled == 1
            assert report.predictions_resolved == 1

            async with store.transaction() as uow:
                stored = await uow.matches.get(match.id)
                assert stored.status == MatchStatus.SETTLED
                assert stored.winner == PredictionType.HOME_TEAM
                assert (stored.home_score, stored.away_score) == (3, 0)

                prediction = await uow.predictions.get(receipt.prediction_id)
                assert prediction.status == PredictionStatus.SUCCESS
                assert prediction.winnings == Decimal("990.00")

                settled_agent = await uow.agents.get(agent.id)
                assert settled_agent.balance == Decimal("10490")
                assert settled_agent.total_bets == 1
                assert settled_agent.won_bets == 1
                assert settled_agent.win_rate == Decimal("1")
                assert settled_agent.roi == Decimal("0.98")

            again = await settlement.run_weekly_settlement()
            assert again.matches_settled == 0
        finally:
            await engine.dispose()

    asyncio.run(run())


def test_lazy_close_is_committed(sql_settings, clock) -> None:
    async def run() -> None:
        engine = create_engine_from_settings(sql_settings)
        try:
            await init_models(engine)
            store = SqlLedgerStore(create_session_factory(engine))
            ledger = LedgerService(store, clock=clock)
            matches = MatchService(store, clock=clock)

            await ledger.register_agent("sql-agent", "SQL Agent", "secret")
            match = await matches.import_match(
                9002, "Spurs", "Fulham", clock.now() + timedelta(minutes=4)
            )
            await matches.open_matches_for_current_week()

            with pytest.raises(StateError):
                await ledger.place_bet(bet(match.id, "200", "secret"))

            async with store.transaction() as uow:
                stored = await uow.matches.get(match.id)
                assert stored.status == MatchStatus.BETTING_CLOSED
                assert await uow.predictions.count_for_match(match.id) == 0
                assert (await uow.agents.get_by_agent_id("sql-agent")).balance == Decimal("10000")
        finally:
            await engine.dispose()

    asyncio.run(run())


def test_window_query_orders_by_kickoff(sql_settings, clock) -> None:
    async def run() -> None:
        engine = create_engine_from_settings(sql_settings)
        try:
            await init_models(engine)
            store = SqlLedgerStore(create_session_factory(engine))
            matches = MatchService(store, clock=clock)
            base = datetime(2026, 2, 3, 12, 0, tzinfo=timezone.utc)

            await matches.import_match(3, "C", "D", base + timedelta(days=2))
            await matches.import_match(1, "A", "B", base)
            await matches.import_match(2, "E", "F", base + timedelta(days=14))

            async with store.transaction() as uow:
                found = await uow.matches.list_in_window(
                    datetime(2026, 2, 2, tzinfo=timezone.utc),
                    datetime(2026, 2, 8, 23, 59, 59, 999000, tzinfo=timezone.utc),
                )
                assert [m.api_id for m in found] == [1, 3]
                assert await uow.matches.get_by_api_id(2) is not None
        finally:
            await engine.dispose()

    asyncio.run(run())


@pytest.mark.parametrize(
    "model, attribute",
    [(Agent, "predictions"), (Match, "predictions"), (Prediction, "agent"), (Prediction, "match")],
)
def test_relationships_are_never_lazy_loaded(model, attribute) -> None:
    assert inspect(model).relationships[attribute].lazy == "raise"


def test_loaded_prediction_does_not_touch_relationships(sql_settings, clock) -> None:
    async def run() -> None:
        engine = create_engine_from_settings(sql_settings)
        try:
            await init_models(engine)
            store = SqlLedgerStore(create_session_factory(engine))
            ledger = LedgerService(store, clock=clock)
            matches = MatchService(store, clock=clock)

            await ledger.register_agent("sql-agent", "SQL Agent", "secret")
            match = await matches.import_match(
                9003, "Brentford", "Wolves", datetime(2026, 2, 12, 20, 0, tzinfo=timezone.utc)
            )
            await matches.open_matches_for_current_week()
            receipt = await ledger.place_bet(bet(match.id, "300", "secret"))

            async with store.transaction() as uow:
                prediction = await uow.predictions.get(receipt.prediction_id)
                assert prediction.match_id == match.id
                with pytest.raises(InvalidRequestError):
                    prediction.match
        finally:
            await engine.dispose()

    asyncio.run(run())
