"""Status and outcome enums."""

from enum import Enum


class MatchStatus(str, Enum):
    """Match lifecycle. Transitions only move forward."""

    UPCOMING = "UPCOMING"
    BETTING_OPEN = "BETTING_OPEN"
    BETTING_CLOSED = "BETTING_CLOSED"
    SETTLED = "SETTLED"

    @property
    def rank(self) -> int:
        return _MATCH_STATUS_ORDER.index(self)

    def can_transition_to(self, target: "MatchStatus") -> bool:
        return target.rank > self.rank


_MATCH_STATUS_ORDER = [
    MatchStatus.UPCOMING,
    MatchStatus.BETTING_OPEN,
    MatchStatus.BETTING_CLOSED,
    MatchStatus.SETTLED,
]


class PredictionType(str, Enum):
    """Outcome an agent bets on; values match the results API winner field."""

    HOME_TEAM = "HOME_TEAM"
    DRAW = "DRAW"
    AWAY_TEAM = "AWAY_TEAM"


class PredictionStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"
