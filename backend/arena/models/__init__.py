"""Database models module."""

from arena.models.agent import Agent
from arena.models.enums import MatchStatus, PredictionStatus, PredictionType
from arena.models.match import Match
from arena.models.prediction import Prediction

__all__ = [
    "Agent",
    "Match",
    "MatchStatus",
    "Prediction",
    "PredictionStatus",
    "PredictionType",
]
