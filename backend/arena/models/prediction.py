"""Prediction (wager) database model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from arena.database.base import Base, JSONType
from arena.models.base import utcnow
from arena.models.enums import PredictionStatus, PredictionType


class Prediction(Base):
    """Append-only wager record with odds frozen at placement."""

    __tablename__ = "predictions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    agent_id = Column(
        Integer,
        ForeignKey("agents.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    match_id = Column(
        Integer,
        ForeignKey("matches.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Bet details
    prediction = Column(Enum(PredictionType, native_enum=False, length=20), nullable=False)
    bet_amount = Column(Numeric(15, 2), nullable=False)
    bet_odd = Column(Numeric(8, 2), nullable=False)

    # Settlement
    status = Column(
        Enum(PredictionStatus, native_enum=False, length=20),
        nullable=False,
        default=PredictionStatus.PENDING,
    )
    winnings = Column(Numeric(15, 2), nullable=True)
    settled_at = Column(DateTime(timezone=True), nullable=True)

    # Analysis report submitted with the bet
    confidence = Column(Integer, nullable=False, default=0)
    summary = Column(String(100), nullable=False, default="")
    content = Column(Text, nullable=True)
    key_points = Column(JSONType, nullable=False, default=list)
    analysis_stats = Column(JSONType, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    agent = relationship("Agent", back_populates="predictions", lazy="raise")
    match = relationship("Match", back_populates="predictions", lazy="raise")

    # Constraints
    __table_args__ = (
        CheckConstraint("bet_amount > 0", name="positive_bet_amount"),
        CheckConstraint("bet_odd > 0", name="positive_bet_odd"),
        CheckConstraint(
            "confidence >= 0 AND confidence <= 100",
            name="valid_confidence",
        ),
        Index("idx_predictions_match_status", "match_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Prediction {self.prediction} {self.bet_amount} @ {self.bet_odd}>"
