"""Agent database model."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String
from sqlalchemy.orm import relationship

from arena.database.base import Base
from arena.models.base import TimestampMixin


class Agent(Base, TimestampMixin):
    """Betting agent with balance and running performance counters."""

    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identifiers
    agent_id = Column(String(64), unique=True, nullable=False, index=True)
    secret_key = Column(String(128), nullable=False)
    name = Column(String(100), nullable=False)

    # Financial tracking
    balance = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    # Performance metrics, only ever written together by settlement
    total_bets = Column(Integer, nullable=False, default=0)
    won_bets = Column(Integer, nullable=False, default=0)
    total_bet_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    total_winnings = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    win_rate = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))
    roi = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))

    # Relationships
    predictions = relationship(
        "Prediction",
        back_populates="agent",
        lazy="raise",
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("balance >= 0", name="balance_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Agent {self.name} ({self.balance})>"
