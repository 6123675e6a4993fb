from arena.errors import ExternalServiceError


class FootballDataAPIError(ExternalServiceError):
    """Base exception for football-data.org errors."""


class FootballDataAuthError(FootballDataAPIError):
    """Token missing or rejected."""

    fatal = True


class FootballDataForbiddenError(FootballDataAPIError):
    """Token is valid but not entitled to this resource."""

    pass


class FootballDataRateLimitError(FootballDataAPIError):
    """Rate limit exceeded."""

    pass


class FootballDataNotFoundError(FootballDataAPIError):
    """Resource not found."""

    pass
