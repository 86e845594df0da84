"""Application settings and configuration management using Pydantic."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    # Environment and deployment
    environment: str = "development"
    debug: bool = False

    # Trading settings
    default_starting_balance: Decimal = Decimal("100000.00")
    commission_per_trade: Decimal = Decimal("4.95")
    trade_max_retries: int = 5
    trade_retry_backoff_ms: int = 25
    transactions_default_limit: int = 50
    leaderboard_default_limit: int = 20

    # API settings
    endpoint_host: str = "0.0.0.0"
    endpoint_port: int = 8000
    endpoint_auth_token: Optional[str] = None
    api_reload: bool = False
    api_log_level: str = "INFO"

    # Database settings
    database_url: Optional[str] = None
    data_directory: str = "data"
    database_echo_sql: bool = False
    database_pool_pre_ping: bool = True
    database_pool_recycle: int = 3600
    database_busy_timeout: int = 30  # seconds

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "structured"  # 'structured' or 'plain'
    log_file_enabled: bool = True
    log_file_path: str = "data/papertrade.log"
    log_max_file_size: str = "10MB"
    log_backup_count: int = 5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_environments = ["development", "testing", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("default_starting_balance")
    @classmethod
    def validate_starting_balance(cls, v):
        """Validate the starting balance handed to new accounts."""
        if v <= 0:
            raise ValueError("Starting balance must be positive")
        return v

    @field_validator("commission_per_trade")
    @classmethod
    def validate_commission(cls, v):
        """Validate the fixed per-trade commission."""
        if v < 0:
            raise ValueError("Commission cannot be negative")
        return v

    @field_validator("trade_max_retries")
    @classmethod
    def validate_retries(cls, v):
        """Validate retry budget for conflicting trades."""
        if v < 0 or v > 50:
            raise ValueError("Trade retries must be between 0 and 50")
        return v

    @field_validator("endpoint_port")
    @classmethod
    def validate_port(cls, v):
        """Validate port number is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("log_level", "api_log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        valid_formats = ["structured", "plain"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    def get_database_url(self) -> str:
        """Get the complete database URL."""
        if self.database_url:
            return self.database_url

        # Default to SQLite in data directory
        db_dir = Path(self.data_directory)
        db_dir.mkdir(parents=True, exist_ok=True)
        db_path = db_dir / "papertrade.db"
        return f"sqlite:///{db_path}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()


def get_required_env_vars() -> list[str]:
    """
    Get list of required environment variables.

    Returns:
        list: List of required environment variable names
    """
    return ["ENDPOINT_AUTH_TOKEN"]
