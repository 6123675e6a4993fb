"""Weekly settlement engine."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import AsyncIterator, Awaitable, Callable, Iterable, TypeVar

from arena.clock import Clock, SystemClock
from arena.config import Settings
from arena.database.repositories import LedgerStore, LedgerUnit
from arena.errors import ConfigurationError, ExternalServiceError
from arena.models import Match, MatchStatus, PredictionStatus
from arena.schemas import SettlementReport
from arena.services.football_data import FootballDataClient, FootballDataConfig
from arena.services.results import MatchResult, ResultFetcher
from arena.utils.time_utils import previous_week_bounds

logger = logging.getLogger(__name__)

T = TypeVar("T")

CURRENCY_PLACES = Decimal("0.01")
RATIO_PLACES = Decimal("0.0001")


class DelayStrategy(ABC):
    """Decides how long to pause before the next external call."""

    @abstractmethod
    async def wait(self) -> None:
        ...


class FixedDelay(DelayStrategy):
    def __init__(
        self,
        seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.seconds = seconds
        self._sleep = sleep

    async def wait(self) -> None:
        if self.seconds > 0:
            await self._sleep(self.seconds)


class RateLimitedIterator:
    """Yields items with a delay between consecutive items (not before the first)."""

    def __init__(self, items: Iterable[T], delay: DelayStrategy):
        self._items = iter(items)
        self._delay = delay
        self._started = False

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        try:
            item = next(self._items)
        except StopIteration:
            raise StopAsyncIteration
        if self._started:
            await self._delay.wait()
        self._started = True
        return item


@dataclass
class AgentStatsDelta:
    resolved: int = 0
    won: int = 0
    staked: Decimal = Decimal("0")
    winnings: Decimal = Decimal("0")


@dataclass
class StatsAccumulator:
    """Per-agent counters gathered over a run and applied once at the end."""

    deltas: dict[int, AgentStatsDelta] = field(default_factory=dict)

    def record(self, agent_pk: int, stake: Decimal, winnings: Decimal, won: bool) -> None:
        delta = self.deltas.setdefault(agent_pk, AgentStatsDelta())
        delta.resolved += 1
        delta.staked += stake
        delta.winnings += winnings
        if won:
            delta.won += 1

    def merge(self, other: "StatsAccumulator") -> None:
        for agent_pk, d in other.deltas.items():
            mine = self.deltas.setdefault(agent_pk, AgentStatsDelta())
            mine.resolved += d.resolved
            mine.won += d.won
            mine.staked += d.staked
            mine.winnings += d.winnings

    async def apply(self, store: LedgerStore) -> int:
        """Write totals and derived ratios, one transaction per agent."""
        updated = 0
        for agent_pk, delta in self.deltas.items():
            try:
                async with store.transaction() as uow:
                    agent = await uow.agents.get(agent_pk, for_update=True)
                    if agent is None:
                        logger.error(f"Agent {agent_pk} vanished before stats update")
                        continue
                    agent.total_bets = agent.total_bets + delta.resolved
                    agent.won_bets = agent.won_bets + delta.won
                    agent.total_bet_amount = Decimal(agent.total_bet_amount) + delta.staked
                    agent.total_winnings = Decimal(agent.total_winnings) + delta.winnings
                    agent.win_rate = _ratio(Decimal(agent.won_bets), Decimal(agent.total_bets))
                    agent.roi = _ratio(
                        agent.total_winnings - agent.total_bet_amount,
                        agent.total_bet_amount,
                    )
            except Exception:
                logger.exception(f"Failed to update stats for agent {agent_pk}")
                continue
            updated += 1
        return updated


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == 0:
        return Decimal("0").quantize(RATIO_PLACES)
    return (numerator / denominator).quantize(RATIO_PLACES)


class SettlementService:
    """
    Resolves last week's pending predictions against final results.

    Safe to re-run: matches already SETTLED are skipped and only PENDING
    predictions are ever touched. A match whose result cannot be fetched, or
    whose settlement transaction fails, is left as it was for the next run.
    """

    def __init__(
        self,
        store: LedgerStore,
        fetcher: ResultFetcher,
        clock: Clock | None = None,
        delay: DelayStrategy | None = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.clock = clock or SystemClock()
        self.delay = delay or FixedDelay(6.0)
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    async def run_weekly_settlement(self) -> SettlementReport:
        window_start, window_end = previous_week_bounds(self.clock.now())

        if self._run_lock.locked():
            logger.warning("Settlement already in progress, skipping this run")
            return SettlementReport(
                window_start=window_start, window_end=window_end, skipped=True
            )

        async with self._run_lock:
            return await self._run(window_start, window_end)

    async def _run(self, window_start: datetime, window_end: datetime) -> SettlementReport:
        logger.info(
            f"Starting settlement for {window_start.isoformat()} - {window_end.isoformat()}"
        )
        report = SettlementReport(window_start=window_start, window_end=window_end)

        async with self.store.transaction() as uow:
            matches = await uow.matches.list_in_window(window_start, window_end)
        report.matches_found = len(matches)

        pending = [m for m in matches if m.status != MatchStatus.SETTLED]
        if not pending:
            logger.info("No matches to settle")
            return report

        stats = StatsAccumulator()
        try:
            async with self.fetcher:
                await self._settle_all(pending, report, stats)
        finally:
            # Deltas from matches already committed are applied even if the run aborts
            report.agents_updated = await stats.apply(self.store)

        logger.info(
            f"Settlement finished: {report.matches_settled}/{report.matches_found} settled, "
            f"{report.matches_deferred} deferred, {len(report.failed_match_ids)} failed, "
            f"{report.predictions_resolved} predictions resolved"
        )
        return report

    async def _settle_all(
        self,
        matches: list[Match],
        report: SettlementReport,
        stats: StatsAccumulator,
    ) -> None:
        async for match in RateLimitedIterator(matches, self.delay):
            try:
                result = await self.fetcher.fetch_result(match.api_id)
            except ConfigurationError as e:
                logger.error(f"Aborting settlement: {e}")
                raise
            except ExternalServiceError as e:
                if e.fatal:
                    logger.error(f"Aborting settlement: {e}")
                    raise
                logger.warning(
                    f"Could not fetch result for match {match.id} (api {match.api_id}): {e}"
                )
                report.matches_deferred += 1
                continue
            except Exception:
                logger.exception(
                    f"Unexpected error fetching result for match {match.id} (api {match.api_id})"
                )
                report.matches_deferred += 1
                continue

            if not result.is_final:
                logger.info(f"Match {match.api_id} is not finished yet. Skipping.")
                report.matches_deferred += 1
                continue

            match_stats = StatsAccumulator()
            try:
                resolved = await self._settle_match(match.id, result, match_stats)
            except Exception:
                logger.exception(
                    f"Failed to settle match {match.id} (api {match.api_id})"
                )
                report.failed_match_ids.append(match.id)
                continue

            if resolved is None:
                continue
            stats.merge(match_stats)
            report.matches_settled += 1
            report.predictions_resolved += resolved

    async def _settle_match(
        self,
        match_id: int,
        result: MatchResult,
        stats: StatsAccumulator,
    ) -> int | None:
        """
        Resolve every PENDING prediction on one match in a single transaction.

        Returns the number of predictions resolved, or None if the match was
        settled by someone else in the meantime.
        """
        now = self.clock.now()
        async with self.store.transaction() as uow:
            match = await uow.matches.get(match_id, for_update=True)
            if match is None or match.status == MatchStatus.SETTLED:
                return None

            predictions = await uow.predictions.list_pending_for_match(
                match_id, for_update=True
            )
            for prediction in predictions:
                stake = Decimal(prediction.bet_amount)
                if prediction.prediction == result.winner:
                    winnings = (stake * Decimal(prediction.bet_odd)).quantize(CURRENCY_PLACES)
                    await self._credit(uow, prediction.agent_id, winnings)
                    prediction.status = PredictionStatus.SUCCESS
                    prediction.winnings = winnings
                else:
                    winnings = Decimal("0.00")
                    prediction.status = PredictionStatus.FAIL
                    prediction.winnings = winnings
                prediction.settled_at = now
                stats.record(
                    prediction.agent_id,
                    stake,
                    winnings,
                    prediction.status == PredictionStatus.SUCCESS,
                )

            self._record_result(match, result)
            match.settled_at = now
            match.transition_to(MatchStatus.SETTLED)

        logger.info(
            f"Settled match {match_id} (api {result.api_id}): winner "
            f"{result.winner.value}, {len(predictions)} predictions"
        )
        return len(predictions)

    async def _credit(self, uow: LedgerUnit, agent_pk: int, amount: Decimal) -> None:
        agent = await uow.agents.get(agent_pk, for_update=True)
        if agent is None:
            raise ValueError(f"Agent {agent_pk} not found for payout")
        agent.balance = Decimal(agent.balance) + amount

    def _record_result(self, match: Match, result: MatchResult) -> None:
        match.winner = result.winner
        match.home_score = result.home_score
        match.away_score = result.away_score


def create_settlement_service(
    settings: Settings,
    store: LedgerStore,
    clock: Clock | None = None,
) -> SettlementService:
    """Wire a SettlementService to football-data.org from settings."""
    fetcher = FootballDataClient(
        settings.require_api_token(),
        FootballDataConfig(
            base_url=settings.results_api.base_url,
            timeout_seconds=settings.results_api.timeout_seconds,
        ),
    )
    return SettlementService(
        store=store,
        fetcher=fetcher,
        clock=clock,
        delay=FixedDelay(settings.settlement.fetch_delay_seconds),
    )
