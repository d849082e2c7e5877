"""Configuration for the Taskboard recurrence service."""
import os
from dataclasses import dataclass
from datetime import date, datetime, timezone
from functools import lru_cache

import pytz
from dotenv import load_dotenv

# Load environment variables but prioritize local development
load_dotenv()


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    value = int(raw)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    database_url: str
    log_level: str
    timezone: str
    lookahead_days: int
    max_catchup_steps: int
    job_interval_seconds: int
    auth_secret: str
    dapr_pubsub_name: str
    dapr_topic: str
    publish_events: bool

    @property
    def tz(self):
        return pytz.timezone(self.timezone)


def load_settings() -> Settings:
    """Build a Settings object from the current environment."""
    zone_name = os.environ.get("TASKBOARD_TIMEZONE", "UTC")
    # Fail fast on unknown zone names
    pytz.timezone(zone_name)

    return Settings(
        database_url=os.environ.get("DATABASE_URL", "sqlite:///./taskboard.db"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        timezone=zone_name,
        lookahead_days=_int_env("RECURRENCE_LOOKAHEAD_DAYS", 7, minimum=0),
        max_catchup_steps=_int_env("RECURRENCE_MAX_CATCHUP_STEPS", 4000),
        job_interval_seconds=_int_env("RECURRENCE_JOB_INTERVAL_SECONDS", 3600),
        auth_secret=os.environ.get("AUTH_SECRET", "dev-only-taskboard-secret-change-me"),
        dapr_pubsub_name=os.environ.get("DAPR_PUBSUB_NAME", "task-pubsub"),
        dapr_topic=os.environ.get("DAPR_TOPIC", "task-events"),
        publish_events=_bool_env("PUBLISH_EVENTS"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor."""
    return load_settings()


def today() -> date:
    """Current calendar date in the configured time zone."""
    return datetime.now(get_settings().tz).date()


def utc_now() -> datetime:
    """Timezone-aware current UTC time for record timestamps."""
    return datetime.now(timezone.utc)
