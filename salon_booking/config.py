"""
Centralized configuration with environment variable overrides.

Scheduling rules (chemical gap, minimum service length) and storage
settings live here so the planner and stores never hardcode them.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    return os.getenv(env_var, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot layout and availability-check rules."""

    chemical_gap_minutes: int = _safe_int("CHEMICAL_GAP_MINUTES", "30")
    min_service_minutes: int = _safe_int("MIN_SERVICE_MINUTES", "1")
    check_schedule_blocks: bool = _safe_bool("CHECK_SCHEDULE_BLOCKS", "false")


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection and table names for the SQL booking store."""

    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./salon.db")
    bookings_table: str = os.getenv("BOOKINGS_TABLE", "bookings")
    schedule_blocks_table: str = os.getenv("SCHEDULE_BLOCKS_TABLE", "schedule_blocks")
    echo: bool = _safe_bool("DATABASE_ECHO", "false")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "salon-booking")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.scheduling.chemical_gap_minutes < 0:
        raise ValueError(
            f"CHEMICAL_GAP_MINUTES must be >= 0, got {config.scheduling.chemical_gap_minutes}"
        )
    if config.scheduling.min_service_minutes < 1:
        raise ValueError(
            f"MIN_SERVICE_MINUTES must be >= 1, got {config.scheduling.min_service_minutes}"
        )
    if not config.database.database_url.strip():
        raise ValueError("DATABASE_URL must not be empty")
    for name, value in [
        ("BOOKINGS_TABLE", config.database.bookings_table),
        ("SCHEDULE_BLOCKS_TABLE", config.database.schedule_blocks_table),
    ]:
        if not value.strip():
            raise ValueError(f"{name} must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info(
        "Configuration loaded for '%s' (chemical gap %d min)",
        config.app_name,
        config.scheduling.chemical_gap_minutes,
    )
    return config


# Singleton instance
settings = load_config()
