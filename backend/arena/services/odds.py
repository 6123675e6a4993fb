"""
Pari-mutuel odds engine.

Each real pool is padded with a fixed virtual seed before pricing so that an
empty market still quotes finite odds:

    effective_x = pool_x + seed_x
    odds_x      = round_half_up(total_effective * payout_factor / effective_x, 2)

Seeds only affect pricing, never payouts.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from arena.config import OddsConfig
from arena.errors import InvariantViolation, ValidationError
from arena.models.enums import PredictionType

ODDS_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class Odds:
    home: Decimal
    draw: Decimal
    away: Decimal

    def for_outcome(self, prediction: PredictionType | str) -> Decimal:
        try:
            outcome = PredictionType(prediction)
        except ValueError:
            raise InvariantViolation(f"Unknown prediction type: {prediction!r}")
        if outcome is PredictionType.HOME_TEAM:
            return self.home
        if outcome is PredictionType.DRAW:
            return self.draw
        return self.away


class OddsEngine:
    """Pure pricing function of (home, draw, away) pools."""

    def __init__(self, config: OddsConfig | None = None):
        self.config = config or OddsConfig()

    def quote(
        self,
        pool_home: Decimal,
        pool_draw: Decimal,
        pool_away: Decimal,
    ) -> Odds:
        pools = [Decimal(pool_home), Decimal(pool_draw), Decimal(pool_away)]
        if any(p < 0 for p in pools):
            raise ValidationError(f"Pools must be non-negative, got {pools}")

        seeds = [self.config.seed_home, self.config.seed_draw, self.config.seed_away]
        effective = [pool + seed for pool, seed in zip(pools, seeds)]
        payout = sum(effective) * self.config.payout_factor

        home, draw, away = (
            (payout / pool).quantize(ODDS_PLACES, rounding=ROUND_HALF_UP)
            for pool in effective
        )
        return Odds(home=home, draw=draw, away=away)


def quote(pool_home: Decimal, pool_draw: Decimal, pool_away: Decimal) -> Odds:
    """Quote with the default seeds and 10% house take."""
    return OddsEngine().quote(pool_home, pool_draw, pool_away)
