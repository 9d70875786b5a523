"""Configuration management for homecal."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.calendar_math import MONDAY, SUNDAY

logger = logging.getLogger(__name__)

HOMECAL_HOME = Path(os.environ.get("HOMECAL_HOME", Path.home() / "homecal"))
CONFIG_FILE = HOMECAL_HOME / "config" / "homecal.conf"
DATA_DIR = HOMECAL_HOME / "data"

PROVIDERS = ("local", "api")
_WEEKDAY_NAMES = {"sunday": SUNDAY, "monday": MONDAY, "0": SUNDAY, "1": MONDAY}


@dataclass
class Config:
    """homecal configuration."""

    calendar_provider: str = "local"
    api_base_url: str = "http://localhost:3001/api"
    api_timeout: float = 10.0
    api_retry_attempts: int = 3
    api_retry_delay: float = 1.0
    sync_interval: int = 300
    first_day_of_week: int = MONDAY
    weeks_before: int = 1
    weeks_after: int = 2
    fetch_margin_months: int = 6
    data_file: Path = field(default_factory=lambda: DATA_DIR / "events.json")
    log_level: str = "WARNING"


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _number(key: str, value: str, cast, default, minimum=0):
    try:
        number = cast(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default
    if number < minimum:
        logger.warning(f"{key.upper()} must be at least {minimum}, using {default}")
        return default
    return number


def load_config() -> Config:
    """Load configuration from homecal.conf."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "calendar_provider":
                if value.lower() in PROVIDERS:
                    config.calendar_provider = value.lower()
                else:
                    logger.warning(f"Unknown CALENDAR_PROVIDER {value!r}, using {config.calendar_provider}")
            case "api_base_url":
                config.api_base_url = value
            case "api_timeout":
                config.api_timeout = _number(key, value, float, config.api_timeout, minimum=0.1)
            case "api_retry_attempts":
                config.api_retry_attempts = _number(key, value, int, config.api_retry_attempts)
            case "api_retry_delay":
                config.api_retry_delay = _number(key, value, float, config.api_retry_delay)
            case "sync_interval":
                config.sync_interval = _number(key, value, int, config.sync_interval, minimum=1)
            case "first_day_of_week":
                if value.lower() in _WEEKDAY_NAMES:
                    config.first_day_of_week = _WEEKDAY_NAMES[value.lower()]
                else:
                    logger.warning(f"Invalid FIRST_DAY_OF_WEEK {value!r}, expected monday or sunday")
            case "weeks_before":
                config.weeks_before = _number(key, value, int, config.weeks_before)
            case "weeks_after":
                config.weeks_after = _number(key, value, int, config.weeks_after)
            case "fetch_margin_months":
                config.fetch_margin_months = _number(key, value, int, config.fetch_margin_months)
            case "data_file":
                config.data_file = Path(value).expanduser()
            case "log_level":
                config.log_level = value.upper()

    return config


def build_store(config: Config):
    """Create the EventStore adapter for the configured provider."""
    from .adapters import ApiEventStore, FileEventStore

    if config.calendar_provider == "api":
        return ApiEventStore(
            config.api_base_url,
            timeout=config.api_timeout,
            retry_attempts=config.api_retry_attempts,
            retry_delay=config.api_retry_delay,
        )
    return FileEventStore(config.data_file)
