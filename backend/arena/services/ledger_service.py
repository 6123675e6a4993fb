"""Bet placement and balance service."""

import hmac
import logging
import secrets
from decimal import ROUND_DOWN, Decimal

from arena.clock import Clock, SystemClock
from arena.config import LedgerConfig
from arena.database.repositories import LedgerStore, LedgerUnit
from arena.errors import AuthenticationError, NotFoundError, StateError, ValidationError
from arena.models import Agent, Match, MatchStatus, Prediction, PredictionStatus
from arena.schemas import BetReceipt, PlaceBetRequest
from arena.services.odds import OddsEngine

logger = logging.getLogger(__name__)

CURRENCY_PLACES = Decimal("0.01")


class LedgerService:
    """
    Validates and commits wagers.

    A bet debits the agent, grows the chosen pool, requotes the match and
    records a PENDING prediction at the freshly quoted odds, all in one
    transaction. The bettor's own stake is folded into the pool before the
    odds are frozen.
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

    async def place_bet(self, request: PlaceBetRequest) -> BetReceipt:
        """
        Place a bet for an agent.

        Checks, in order:
        1. Agent exists and secret matches
        2. Match exists
        3. Match is BETTING_OPEN
        4. Betting deadline has not passed (closes the match if it has)
        5. Stake within [minimum, fraction of current balance]
        6. Balance covers stake
        """
        deadline_error: StateError | None = None

        async with self.store.transaction() as uow:
            agent = await self._authenticate(
                uow, request.agent_id, request.secret_key, for_update=True
            )

            match = await uow.matches.get(request.match_id, for_update=True)
            if match is None:
                raise NotFoundError(f"Match with ID {request.match_id} not found.")

            if match.status != MatchStatus.BETTING_OPEN:
                status = MatchStatus(match.status).value
                raise StateError(
                    f"Betting for this match is not allowed. Status: {status}",
                    status=status,
                )

            now = self.clock.now()
            if now >= match.betting_deadline(self.config.betting_lockout_minutes):
                # Lazy close; committed even though the bet is refused.
                match.transition_to(MatchStatus.BETTING_CLOSED)
                logger.info(f"Match {match.id} closed lazily at {now.isoformat()}")
                deadline_error = StateError(
                    "Betting deadline has passed for this match.",
                    status=MatchStatus.BETTING_CLOSED.value,
                )
            else:
                return await self._commit_bet(uow, agent, match, request)

        raise deadline_error

    async def register_agent(
        self, agent_id: str, name: str, secret_key: str | None = None
    ) -> Agent:
        """Create an agent holding the configured starting balance."""
        async with self.store.transaction() as uow:
            if await uow.agents.get_by_agent_id(agent_id) is not None:
                raise ValidationError(f"Agent {agent_id} already exists.")
            agent = await uow.agents.add(
                Agent(
                    agent_id=agent_id,
                    name=name,
                    secret_key=secret_key or secrets.token_urlsafe(32),
                    balance=self.config.initial_balance,
                )
            )
        logger.info(f"Registered agent {agent_id} with {agent.balance} points")
        return agent

    async def get_balance(self, agent_id: str, secret_key: str) -> Decimal:
        """Read an agent's balance after the same credential check as betting."""
        async with self.store.transaction() as uow:
            agent = await self._authenticate(uow, agent_id, secret_key)
            return Decimal(agent.balance)

    async def _authenticate(
        self,
        uow: LedgerUnit,
        agent_id: str,
        secret_key: str,
        for_update: bool = False,
    ) -> Agent:
        agent = await uow.agents.get_by_agent_id(agent_id, for_update=for_update)
        if agent is None:
            logger.warning(f"Rejected credentials for unknown agent {agent_id}")
            raise AuthenticationError()
        if not hmac.compare_digest(
            agent.secret_key.encode("utf-8"), secret_key.encode("utf-8")
        ):
            logger.warning(f"Rejected credentials for agent {agent_id}")
            raise AuthenticationError()
        return agent

    def _validate_stake(self, balance: Decimal, amount: Decimal) -> None:
        if amount < self.config.min_bet_amount:
            raise ValidationError(
                f"Minimum bet amount is {self.config.min_bet_amount} points.",
                code=ValidationError.BELOW_MINIMUM,
                limit=self.config.min_bet_amount,
            )

        ceiling = (balance * self.config.max_bet_fraction).quantize(
            CURRENCY_PLACES, rounding=ROUND_DOWN
        )
        if amount > ceiling:
            raise ValidationError(
                f"Cannot bet more than {self.config.max_bet_fraction:.0%} of your "
                f"total points ({ceiling} points).",
                code=ValidationError.ABOVE_CEILING,
                limit=ceiling,
            )

        if balance < amount:
            raise ValidationError(
                "Insufficient balance.",
                code=ValidationError.INSUFFICIENT_BALANCE,
                limit=balance,
            )

    async def _commit_bet(
        self,
        uow: LedgerUnit,
        agent: Agent,
        match: Match,
        request: PlaceBetRequest,
    ) -> BetReceipt:
        balance = Decimal(agent.balance)
        amount = Decimal(request.bet_amount).quantize(CURRENCY_PLACES)
        self._validate_stake(balance, amount)

        agent.balance = balance - amount

        match.add_stake(request.prediction, amount)
        odds = self.odds_engine.quote(*match.pools())
        match.odds_home, match.odds_draw, match.odds_away = odds.home, odds.draw, odds.away
        bet_odd = odds.for_outcome(request.prediction)

        prediction = await uow.predictions.add(
            Prediction(
                agent_id=agent.id,
                match_id=match.id,
                prediction=request.prediction,
                bet_amount=amount,
                bet_odd=bet_odd,
                status=PredictionStatus.PENDING,
                confidence=request.confidence,
                summary=request.summary[:100],
                content=request.content,
                key_points=list(request.key_points),
                analysis_stats=request.analysis_stats or {},
            )
        )

        logger.info(
            f"Placed bet: {agent.name} {request.prediction.value} {amount} "
            f"@ {bet_odd} on match {match.id} (prediction {prediction.id})"
        )

        return BetReceipt(
            agent_name=agent.name,
            remaining_balance=agent.balance,
            bet_amount=amount,
            bet_odd=bet_odd,
            prediction_type=request.prediction,
            match_id=match.id,
            prediction_id=prediction.id,
        )
