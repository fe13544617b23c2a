import logging

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core import SchedulerConfig


class Settings(BaseSettings):
    """Scheduler settings"""

    # Scheduling defaults
    default_duration_minutes: int = Field(
        default=60, ge=1, le=1440, description="Duration used when a task has no estimate"
    )
    search_step_minutes: int = Field(
        default=15, ge=1, description="Cursor step when no conflicting slot bounds the scan"
    )
    working_hours_start: int = Field(default=9, ge=0, le=23)
    working_hours_end: int = Field(default=17, ge=1, le=24)

    # Logging
    log_level: str = Field(default="INFO")

    # Environment
    environment: str = Field(
        default="development", pattern="^(development|staging|production|test)$"
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a stdlib logging level name"""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def validate_working_hours(self) -> "Settings":
        if self.working_hours_start >= self.working_hours_end:
            raise ValueError("working_hours_start must be before working_hours_end")
        return self

    def scheduler_config(self) -> SchedulerConfig:
        """Build the core scheduler config from these settings"""
        return SchedulerConfig(
            default_duration_minutes=self.default_duration_minutes,
            search_step_minutes=self.search_step_minutes,
        )


settings = Settings()
