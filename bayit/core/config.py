"""Configuration management for bayit."""

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

    # Storage Configuration
    sqlite_db_path: str = Field(default="./data/bayit.db", description="SQLite database file path")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Cron trigger Configuration
    cron_secret: str | None = Field(
        default=None, description="Bearer secret required by the manual auto-schedule endpoint"
    )

    # Household Defaults
    default_golden_rule_target: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Golden rule completion target (percent) when a household has none",
    )

    # Auto-scheduler Configuration
    schedule_window_days: int = Field(
        default=7, ge=1, description="Rolling window of days generated on each auto-schedule run"
    )
    auto_schedule_hour: int = Field(default=1, ge=0, le=23, description="Hour of the daily auto-schedule run")
    auto_schedule_minute: int = Field(default=0, ge=0, le=59, description="Minute of the daily auto-schedule run")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_UNAUTHORIZED: int = 401
    HTTP_SERVER_ERROR: int = 500
    HTTP_SERVICE_UNAVAILABLE: int = 503

    # Room health: hours after completion at which health reaches 0
    HEALTH_MAX_HOURS_DAILY: int = 48
    HEALTH_MAX_HOURS_WEEKLY: int = 14 * 24
    HEALTH_MAX_HOURS_BIWEEKLY: int = 28 * 24
    HEALTH_MAX_HOURS_MONTHLY: int = 60 * 24
    HEALTH_MAX_HOURS_QUARTERLY: int = 180 * 24
    HEALTH_MAX_HOURS_YEARLY: int = 730 * 24

    # Health bands (inclusive lower bounds)
    HEALTH_EXCELLENT_MIN: int = 80
    HEALTH_GOOD_MIN: int = 50
    HEALTH_ATTENTION_MIN: int = 25

    # Energy filter thresholds (estimated minutes)
    ENERGY_LIGHT_MAX_MINUTES: int = 5
    ENERGY_HEAVY_MIN_MINUTES: int = 20

    # Daily load thresholds (strictly greater than)
    LOAD_HEAVY_MINUTES: int = 60
    LOAD_MODERATE_MINUTES: int = 30
    LOAD_NEXT_DAY_LIGHT_MINUTES: int = 30  # next day must be below this for a move suggestion
    LOAD_ENERGY_TIP_MINUTES: int = 40
    ROOM_BATCH_MIN_TASKS: int = 3

    # Minute estimates by keyword tier
    MINUTES_HEAVY_TASK: int = 30
    MINUTES_MEDIUM_TASK: int = 15
    MINUTES_LIGHT_TASK: int = 5

    # Stats
    UPCOMING_WINDOW_DAYS: int = 7
    MONTHLY_DATA_DAYS: int = 30
    STREAK_LOOKBACK_DAYS: int = 365

    # Scheduler retries
    JOB_MAX_RETRIES: int = 3
    JOB_RETRY_BASE_DELAY_SECONDS: float = 2.0
    TRACKER_DEAD_LETTER_QUEUE_MAXLEN: int = 100  # Max items in dead letter queue
    TRACKER_DEAD_LETTER_THRESHOLD: int = 3  # Consecutive failed runs before a job is dead-lettered
    TRACKER_ERROR_MAX_CHARS: int = 500


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
