"""
Centralized configuration with environment variable overrides.

Salon details, the booking window, store collection names, and the static
app-shell settings all live here. Nothing is hardcoded in the controllers
or the domain logic.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


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
    """Parse a boolean flag from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class SalonConfig:
    """Salon-facing settings."""

    name: str = os.getenv("SALON_NAME", "ParlourEase")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")
    # IANA zone name; empty means the host's local time.
    timezone: str = os.getenv("SALON_TIMEZONE", "")

    @property
    def tzinfo(self) -> Optional[tzinfo]:
        if not self.timezone:
            return None
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class ScheduleConfig:
    """Operating window and slot spacing for bookable times."""

    open_hour: int = _safe_int("SALON_OPEN_HOUR", "9")
    close_hour: int = _safe_int("SALON_CLOSE_HOUR", "18")
    slot_interval_minutes: int = _safe_int("SLOT_INTERVAL_MINUTES", "15")
    festival_slot_interval_minutes: int = _safe_int("FESTIVAL_SLOT_INTERVAL_MINUTES", "30")


@dataclass(frozen=True)
class StoreConfig:
    """Hosted document store settings."""

    project_id: str = os.getenv("STORE_PROJECT_ID", "parlourease")
    services_collection: str = os.getenv("SERVICES_COLLECTION", "services")
    bookings_collection: str = os.getenv("BOOKINGS_COLLECTION", "bookings")
    seed_demo_data: bool = _safe_bool("SEED_DEMO_DATA", "true")


@dataclass(frozen=True)
class ShellConfig:
    """Static settings consumed by the mobile-shell packaging tool."""

    app_id: str
    app_name: str
    web_dir: str = "out"


def _admin_shell() -> ShellConfig:
    return ShellConfig(
        app_id=os.getenv("ADMIN_APP_ID", "com.parlourease.admin"),
        app_name=os.getenv("ADMIN_APP_NAME", "Parlour Ease Admin"),
        web_dir=os.getenv("ADMIN_WEB_DIR", "out"),
    )


def _client_shell() -> ShellConfig:
    return ShellConfig(
        app_id=os.getenv("CLIENT_APP_ID", "com.parlourease.client"),
        app_name=os.getenv("CLIENT_APP_NAME", "Parlour Ease Client"),
        web_dir=os.getenv("CLIENT_WEB_DIR", "out"),
    )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    salon: SalonConfig = field(default_factory=SalonConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    admin_shell: ShellConfig = field(default_factory=_admin_shell)
    client_shell: ShellConfig = field(default_factory=_client_shell)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    schedule = config.schedule
    if not 0 <= schedule.open_hour <= 23:
        raise ValueError(f"SALON_OPEN_HOUR must be between 0 and 23, got {schedule.open_hour}")
    if not 0 <= schedule.close_hour <= 23:
        raise ValueError(f"SALON_CLOSE_HOUR must be between 0 and 23, got {schedule.close_hour}")
    if schedule.close_hour < schedule.open_hour:
        raise ValueError(
            "SALON_CLOSE_HOUR must not be earlier than SALON_OPEN_HOUR, "
            f"got {schedule.open_hour}-{schedule.close_hour}"
        )

    for name, minutes in [
        ("SLOT_INTERVAL_MINUTES", schedule.slot_interval_minutes),
        ("FESTIVAL_SLOT_INTERVAL_MINUTES", schedule.festival_slot_interval_minutes),
    ]:
        if not 1 <= minutes <= 60:
            raise ValueError(f"{name} must be between 1 and 60, got {minutes}")

    if not config.store.services_collection or not config.store.bookings_collection:
        raise ValueError("SERVICES_COLLECTION and BOOKINGS_COLLECTION must not be empty")
    if config.store.services_collection == config.store.bookings_collection:
        raise ValueError(
            "SERVICES_COLLECTION and BOOKINGS_COLLECTION must differ, "
            f"got {config.store.services_collection!r} for both"
        )

    if config.salon.timezone:
        try:
            config.salon.tzinfo
        except (KeyError, ValueError):
            raise ValueError(f"Unknown SALON_TIMEZONE: {config.salon.timezone!r}") from None

    for label, shell in [("ADMIN", config.admin_shell), ("CLIENT", config.client_shell)]:
        if not shell.app_id or not shell.app_name:
            raise ValueError(f"{label}_APP_ID and {label}_APP_NAME must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.salon.name)
    return config


# Singleton instance
settings = load_config()
