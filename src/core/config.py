"""Configuration management for sprintledger."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/sprintledger.db", description="Path to the SQLite database file")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    # Team Capacity Defaults
    default_developers: int = Field(default=1, ge=0, description="Developers used when a request omits capacity")
    default_hours_per_day: int = Field(default=8, ge=0, description="Working hours per developer per day")
    default_sprint_days: int = Field(default=10, ge=1, description="Nominal sprint length in days")

    # WIP Limit Defaults
    wip_limits_enforced: bool = Field(
        default=False, description="Block moves that exceed WIP limits (otherwise limits are advisory)"
    )
    wip_limit_prioritized: int | None = Field(default=10, ge=0, description="WIP limit for the Prioritized column")
    wip_limit_doing: int | None = Field(default=8, ge=0, description="WIP limit for the Doing column")

    # Movement Log
    default_actor: str = Field(default="system", description="Actor recorded on movements when none is supplied")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Estimation Ledger
    LEDGER_DAYS: int = 10  # One slot per sprint day, days 1-10

    # Time Validation
    ERROR_RATE_REASON_THRESHOLD: float = 20.0  # Percent overrun above which a reason is mandatory

    # HTTP Status Codes
    HTTP_BAD_REQUEST: int = 400
    HTTP_CONFLICT: int = 409
    HTTP_UNPROCESSABLE: int = 422


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
