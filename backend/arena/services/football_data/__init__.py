from .client import FootballDataClient
from .config import FootballDataConfig
from .exceptions import (
    FootballDataAPIError,
    FootballDataAuthError,
    FootballDataForbiddenError,
    FootballDataNotFoundError,
    FootballDataRateLimitError,
)

__all__ = [
    "FootballDataClient",
    "FootballDataConfig",
    "FootballDataAPIError",
    "FootballDataAuthError",
    "FootballDataForbiddenError",
    "FootballDataNotFoundError",
    "FootballDataRateLimitError",
]
