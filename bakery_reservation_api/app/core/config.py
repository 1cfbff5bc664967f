"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration; in a production deployment
override them via environment variables.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Bakery Reservation API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Path or connection string for the SQLite database.  A relative
    # path is resolved relative to the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "bakery.db")

    # Daily sales rollup.  ``sales_rollup_time`` is the local wall-clock
    # time (``HH:MM``) at which the job fires and ``sales_rollup_days``
    # lists the weekdays it fires on, either as a range (``MON-FRI``) or
    # a comma-separated list (``MON,WED,FRI``).
    sales_rollup_enabled: bool = _env_flag("SALES_ROLLUP_ENABLED", "true")
    sales_rollup_time: str = os.getenv("SALES_ROLLUP_TIME", "23:00")
    sales_rollup_days: str = os.getenv("SALES_ROLLUP_DAYS", "MON-FRI")
    # When true, a day without completed reservations is skipped instead
    # of being reported as an error.
    sales_rollup_skip_empty: bool = _env_flag("SALES_ROLLUP_SKIP_EMPTY", "false")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
