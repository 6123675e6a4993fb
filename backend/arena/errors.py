"""
Arena Exception Hierarchy

Exception Classes:
- ArenaError: Base exception
- AuthenticationError: Unknown agent or wrong secret (never says which)
- ValidationError: Bad stake or malformed input
- StateError: Match not accepting bets (carries current status)
- NotFoundError: Unknown match/agent/prediction
- ExternalServiceError: Result fetch failed or timed out (non-fatal)
- InvariantViolation: Internal bug, should never reach a caller
- ConfigurationError: Missing credentials or settings (fatal for a run)
"""

from decimal import Decimal


class ArenaError(Exception):
    """Base exception for ledger, lifecycle and settlement errors."""


class AuthenticationError(ArenaError):
    """Agent credentials were rejected."""

    def __init__(self, message: str = "Invalid agent credentials."):
        super().__init__(message)


class ValidationError(ArenaError):
    """Input was rejected by a ledger rule."""

    BELOW_MINIMUM = "BELOW_MINIMUM"
    ABOVE_CEILING = "ABOVE_CEILING"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    MALFORMED = "MALFORMED"

    def __init__(
        self,
        message: str,
        code: str = MALFORMED,
        limit: Decimal | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.limit = limit


class StateError(ArenaError):
    """Match is not in a state that allows the requested action."""

    def __init__(self, message: str, status: str):
        super().__init__(message)
        self.status = status


class NotFoundError(ArenaError):
    """Resource not found."""


class ExternalServiceError(ArenaError):
    """An external dependency failed; callers treat the work as deferred."""

    # Set on errors that no retry can fix, such as rejected credentials
    fatal = False

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvariantViolation(ArenaError):
    """A state that upstream validation should have made impossible."""


class ConfigurationError(ArenaError):
    """Required configuration is missing or invalid."""
