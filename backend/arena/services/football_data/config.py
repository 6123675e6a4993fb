from pydantic import BaseModel


class FootballDataConfig(BaseModel):
    """Configuration for the football-data.org client."""

    base_url: str = "https://api.football-data.org/v4"
    timeout_seconds: float = 10.0
    max_connections: int = 10
    max_retries: int = 1
