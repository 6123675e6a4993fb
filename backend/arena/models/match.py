"""Match database model."""

from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from arena.database.base import Base
from arena.errors import InvariantViolation
from arena.models.base import TimestampMixin
from arena.models.enums import MatchStatus, PredictionType
from arena.utils.time_utils import ensure_utc

_POOL_COLUMNS = {
    PredictionType.HOME_TEAM: "pool_home",
    PredictionType.DRAW: "pool_draw",
    PredictionType.AWAY_TEAM: "pool_away",
}


class Match(Base, TimestampMixin):
    """Fixture imported from the external schedule, with its betting market."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # football-data.org identifier
    api_id = Column(Integer, unique=True, nullable=False, index=True)

    home_team = Column(String(100), nullable=False)
    away_team = Column(String(100), nullable=False)
    utc_date = Column(DateTime(timezone=True), nullable=False)

    # Lifecycle
    status = Column(
        Enum(MatchStatus, native_enum=False, length=20),
        nullable=False,
        default=MatchStatus.UPCOMING,
    )

    # Real stake pools
    pool_home = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    pool_draw = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    pool_away = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    # Quoted odds; import_match writes the configured empty-pool quote
    odds_home = Column(Numeric(8, 2), nullable=False, default=Decimal("2.52"))
    odds_draw = Column(Numeric(8, 2), nullable=False, default=Decimal("3.15"))
    odds_away = Column(Numeric(8, 2), nullable=False, default=Decimal("2.52"))

    # Outcome (after settlement)
    winner = Column(Enum(PredictionType, native_enum=False, length=20), nullable=True)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    settled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    predictions = relationship(
        "Prediction",
        back_populates="match",
        lazy="raise",
    )

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "pool_home >= 0 AND pool_draw >= 0 AND pool_away >= 0",
            name="pools_non_negative",
        ),
        Index("idx_matches_utc_date", "utc_date"),
        Index("idx_matches_status", "status"),
    )

    @property
    def kickoff(self) -> datetime:
        return ensure_utc(self.utc_date)

    def betting_deadline(self, lockout_minutes: int) -> datetime:
        return self.kickoff - timedelta(minutes=lockout_minutes)

    def pools(self) -> tuple[Decimal, Decimal, Decimal]:
        return (
            Decimal(self.pool_home),
            Decimal(self.pool_draw),
            Decimal(self.pool_away),
        )

    def add_stake(self, prediction: PredictionType, amount: Decimal) -> None:
        try:
            column = _POOL_COLUMNS[PredictionType(prediction)]
        except (KeyError, ValueError):
            raise InvariantViolation(f"Unknown prediction type: {prediction!r}")
        setattr(self, column, Decimal(getattr(self, column)) + amount)

    def transition_to(self, target: MatchStatus) -> None:
        current = MatchStatus(self.status)
        if not current.can_transition_to(target):
            raise InvariantViolation(
                f"Match {self.id} cannot move from {current.value} to {target.value}"
            )
        self.status = target

    def __repr__(self) -> str:
        return f"<Match {self.home_team} vs {self.away_team} ({self.status})>"
