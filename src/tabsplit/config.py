"""Configuration management for tabsplit."""

from decimal import Decimal
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TABSPLIT_",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger snapshot used by the CLI
    database_path: Path = Path.home() / ".tabsplit" / "tabsplit.db"

    # Allowed gap between sum of shares and expense amount before warning
    share_tolerance: Decimal = Decimal("0.01")

    # Balances and transfers at or below this are treated as zero
    dust_threshold: Decimal = Decimal("0.005")

    log_level: str = "INFO"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings(**overrides) -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings(**overrides)
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check your TABSPLIT_* environment "
            f"variables and .env file.\n"
            f"Error: {e}"
        ) from e
