"""Configuration management using Pydantic Settings."""

import logging
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arena.errors import ConfigurationError

logger = logging.getLogger(__name__)


class LedgerConfig(BaseModel):
    """Bet acceptance rules."""

    min_bet_amount: Decimal = Decimal("100")
    max_bet_fraction: Decimal = Decimal("0.20")  # of balance before debit
    betting_lockout_minutes: int = 10
    initial_balance: Decimal = Decimal("10000")


class OddsConfig(BaseModel):
    """Pari-mutuel pricing parameters."""

    seed_home: Decimal = Decimal("1000")
    seed_draw: Decimal = Decimal("800")
    seed_away: Decimal = Decimal("1000")
    payout_factor: Decimal = Decimal("0.90")  # 10% house take


class SettlementConfig(BaseModel):
    """Settlement and lifecycle job timing."""

    fetch_delay_seconds: float = 6.0  # ~10 requests/minute external budget
    cron_day_of_week: str = "mon"
    cron_hour: int = 4
    cron_minute: int = 0
    open_cron_hour: int = 0
    open_cron_minute: int = 5
    close_interval_minutes: int = 5


class ResultsApiConfig(BaseModel):
    """football-data.org client parameters."""

    base_url: str = "https://api.football-data.org/v4"
    timeout_seconds: float = 10.0


class Settings(BaseSettings):
    """Main configuration class."""

    # Paths
    data_dir: Path = Path("data")

    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///./arena.db"

    # API Keys
    football_data_api_token: str = ""
    logfire_token: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Nested configuration sections
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    odds: OddsConfig = Field(default_factory=OddsConfig)
    settlement: SettlementConfig = Field(default_factory=SettlementConfig)
    results_api: ResultsApiConfig = Field(default_factory=ResultsApiConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def require_api_token(self) -> str:
        """Return the results API token or fail fast."""
        if not self.football_data_api_token:
            raise ConfigurationError(
                "FOOTBALL_DATA_API_TOKEN is not set; settlement cannot run."
            )
        return self.football_data_api_token

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}. Using defaults.")
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in ["ledger", "odds", "settlement", "results_api"]:
                if section_name in yaml_config:
                    section = getattr(self, section_name)
                    section_dict = section.model_dump()
                    section_dict.update(yaml_config[section_name])
                    setattr(self, section_name, section.__class__(**section_dict))

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
