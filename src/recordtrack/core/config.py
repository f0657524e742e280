"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class TrackerConfig(BaseSettings):
    """Record tracker behaviour."""

    model_config = {"env_prefix": "RECORDTRACK_TRACKER_"}

    max_attempts: int = 3
    cleanup_max_age_hours: float = 24.0
    display_name_field: str = "Client Name"  # payload key shown in failure reports
    strict_terminal: bool = True  # reject attempt/error writes after a terminal state


class MaintenanceConfig(BaseSettings):
    """Periodic cleanup task configuration."""

    model_config = {"env_prefix": "RECORDTRACK_MAINTENANCE_"}

    enabled: bool = True
    interval_seconds: float = 3600.0


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "RECORDTRACK_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    tracker: TrackerConfig = TrackerConfig()
    maintenance: MaintenanceConfig = MaintenanceConfig()
