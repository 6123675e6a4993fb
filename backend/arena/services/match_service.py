"""Match lifecycle service."""

import logging
from datetime import datetime
from decimal import Decimal

from arena.clock import Clock, SystemClock
from arena.config import LedgerConfig
from arena.database.repositories import LedgerStore
from arena.errors import StateError
from arena.models import Match, MatchStatus
from arena.services.odds import OddsEngine
from arena.utils.time_utils import ensure_utc, week_bounds

logger = logging.getLogger(__name__)


class MatchService:
    """
    Moves matches forward through UPCOMING -> BETTING_OPEN -> BETTING_CLOSED.

    SETTLED is reserved for the settlement engine.
    """

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock | None = None,
        config: LedgerConfig | None = None,
        odds_engine: OddsEngine | None = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.config = config or LedgerConfig()
        self.odds_engine = odds_engine or OddsEngine()

    async def import_match(
        self,
        api_id: int,
        home_team: str,
        away_team: str,
        utc_date: datetime,
    ) -> Match:
        """
        Register a fixture from the external schedule as UPCOMING.

        Re-importing a known fixture updates its teams and kickoff while it
        is still UPCOMING; afterwards the fixture is left alone.
        """
        opening = self.odds_engine.quote(Decimal("0"), Decimal("0"), Decimal("0"))
        async with self.store.transaction() as uow:
            existing = await uow.matches.get_by_api_id(api_id, for_update=True)
            if existing is None:
                match = await uow.matches.add(
                    Match(
                        api_id=api_id,
                        home_team=home_team,
                        away_team=away_team,
                        utc_date=ensure_utc(utc_date),
                        status=MatchStatus.UPCOMING,
                        odds_home=opening.home,
                        odds_draw=opening.draw,
                        odds_away=opening.away,
                    )
                )
                logger.info(f"Imported match {api_id}: {home_team} vs {away_team}")
                return match

            if existing.status != MatchStatus.UPCOMING:
                raise StateError(
                    f"Match {api_id} can no longer be rescheduled. "
                    f"Status: {MatchStatus(existing.status).value}",
                    status=MatchStatus(existing.status).value,
                )
            existing.home_team = home_team
            existing.away_team = away_team
            existing.utc_date = ensure_utc(utc_date)
            existing.odds_home = opening.home
            existing.odds_draw = opening.draw
            existing.odds_away = opening.away
            logger.info(f"Updated match {api_id}: {home_team} vs {away_team}")
            return existing

    async def open_matches_for_current_week(self) -> int:
        """Open betting on every UPCOMING match kicking off this UTC week."""
        start, end = week_bounds(self.clock.now())
        try:
            async with self.store.transaction() as uow:
                matches = await uow.matches.list_in_window(
                    start, end, status=MatchStatus.UPCOMING
                )
                for match in matches:
                    match.transition_to(MatchStatus.BETTING_OPEN)
        except Exception as e:
            logger.error(f"Error updating match statuses: {e}")
            raise

        logger.info(
            f"{len(matches)} matches updated to BETTING_OPEN for the week "
            f"{start.date().isoformat()} - {end.date().isoformat()}"
        )
        return len(matches)

    async def close_expired_matches(self) -> int:
        """Close every open match whose betting deadline has passed."""
        now = self.clock.now()
        lockout = self.config.betting_lockout_minutes

        async with self.store.transaction() as uow:
            open_matches = await uow.matches.list_by_status(MatchStatus.BETTING_OPEN)
            expired = [m for m in open_matches if now >= m.betting_deadline(lockout)]
            for match in expired:
                match.transition_to(MatchStatus.BETTING_CLOSED)

        if expired:
            logger.info(f"Closed betting on {len(expired)} matches")
        return len(expired)

    async def run_weekly_open(self) -> int:
        """Scheduled entry point; failures are logged, never raised."""
        logger.info("Starting weekly match status update...")
        try:
            count = await self.open_matches_for_current_week()
        except Exception:
            logger.exception("Weekly match status update failed")
            return 0
        logger.info("Weekly match status update completed")
        return count
