from typing import Literal

from fastapi import Depends
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Vocab Jobs", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment")
    debug: bool = Field(default=True, description="Debug mode")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )

    # Server
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Job engine
    job_concurrency: int = Field(
        default=5, ge=1, description="Maximum jobs executing at once"
    )
    job_max_attempts: int = Field(
        default=3, ge=1, description="Default attempt ceiling per job"
    )
    job_retry_delay_ms: int = Field(
        default=5000,
        ge=0,
        description="Base retry delay, multiplied by the attempt count",
    )
    job_timeout_ms: int = Field(
        default=60000, gt=0, description="Per-attempt handler timeout"
    )
    job_auto_start: bool = Field(
        default=True, description="Start the dispatch loop on first submission"
    )

    # Recurring jobs
    job_recurring_enabled: bool = Field(
        default=True, description="Register built-in recurring schedules"
    )
    job_cleanup_interval_ms: int = Field(
        default=60 * 60 * 1000,
        gt=0,
        description="Interval of the completed-job cleanup schedule",
    )
    job_reminders_interval_ms: int = Field(
        default=24 * 60 * 60 * 1000,
        gt=0,
        description="Interval of the daily reminder schedule",
    )
    job_streaks_interval_ms: int = Field(
        default=60 * 60 * 1000,
        gt=0,
        description="Interval of the streak update schedule",
    )

    def model_post_init(self, __context) -> None:
        """Validate settings after initialization."""
        # Debug output must never reach production logs
        if self.environment == "production" and self.debug:
            raise ValueError(
                "DEBUG=true is not allowed in production environment. "
                "Set DEBUG=false for production deployments."
            )

    @property
    def job_timeout_s(self) -> float:
        return self.job_timeout_ms / 1000


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Dependency injection function for settings."""
    return settings


# Convenience type alias for dependency injection
SettingsDep = Depends(get_settings)
