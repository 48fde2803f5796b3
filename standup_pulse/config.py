"""Configuration helpers for Standup Pulse."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import ScheduleSpec, UserConfig
from .schedule import get_zone, parse_schedule

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE = "0 9 * * 1-5"
DEFAULT_TIMEZONE = "Europe/Sofia"
DEFAULT_NOTIFY_TIMEOUT = 30.0


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    slack_bot_token: str
    notifications_channel_id: str
    schedule_expression: str
    schedule: ScheduleSpec
    default_timezone: str = DEFAULT_TIMEZONE
    api_key: Optional[str] = None
    tick_interval_seconds: int = 60
    notify_timeout_seconds: float = DEFAULT_NOTIFY_TIMEOUT


def load_roster(raw: str | None = None, default_timezone: str = DEFAULT_TIMEZONE) -> List[UserConfig]:
    """Parse ``"userId:timezone"`` pairs, reading ``TARGET_USERS`` when ``raw`` is omitted.

    Called once per tick so roster edits apply without a restart.
    """

    if raw is None:
        raw = os.getenv("TARGET_USERS", "")

    roster: List[UserConfig] = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        user_id, _, tz_name = entry.partition(":")
        user_id = user_id.strip()
        if not user_id:
            logger.warning("Skipping roster entry without a user id: %r", entry)
            continue
        roster.append(UserConfig(user_id=user_id, timezone=tz_name.strip() or default_timezone))
    return roster


def validate_roster(roster: List[UserConfig]) -> None:
    if not roster:
        raise ConfigurationError("TARGET_USERS must list at least one user")
    for user in roster:
        get_zone(user.timezone)


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    slack_token = os.getenv("SLACK_BOT_TOKEN")
    channel_id = os.getenv("NOTIFICATIONS_CHANNEL_ID")
    if not slack_token:
        raise ConfigurationError("SLACK_BOT_TOKEN must be configured")
    if not channel_id:
        raise ConfigurationError("NOTIFICATIONS_CHANNEL_ID must be configured")

    expression = os.getenv("STANDUP_SCHEDULE") or DEFAULT_SCHEDULE
    schedule = parse_schedule(expression)

    default_timezone = os.getenv("DEFAULT_TIMEZONE") or DEFAULT_TIMEZONE
    get_zone(default_timezone)
    validate_roster(load_roster(default_timezone=default_timezone))

    try:
        tick_interval = int(os.getenv("TICK_INTERVAL_SECONDS", "60"))
        raw_timeout = os.getenv("NOTIFY_TIMEOUT_SECONDS")
        notify_timeout = float(raw_timeout) if raw_timeout else None
    except ValueError as exc:
        raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc
    if not 1 <= tick_interval <= 60:
        raise ConfigurationError("TICK_INTERVAL_SECONDS must be between 1 and 60")
    if notify_timeout is None:
        notify_timeout = min(DEFAULT_NOTIFY_TIMEOUT, tick_interval / 2)
    # A tick's notifies must finish before the next tick is due.
    if not 0 < notify_timeout < tick_interval:
        raise ConfigurationError(
            "NOTIFY_TIMEOUT_SECONDS must be positive and shorter than TICK_INTERVAL_SECONDS"
        )

    return Settings(
        slack_bot_token=slack_token,
        notifications_channel_id=channel_id,
        schedule_expression=expression,
        schedule=schedule,
        default_timezone=default_timezone,
        api_key=os.getenv("API_KEY") or None,
        tick_interval_seconds=tick_interval,
        notify_timeout_seconds=notify_timeout,
    )


__all__ = [
    "DEFAULT_SCHEDULE",
    "DEFAULT_TIMEZONE",
    "Settings",
    "load_roster",
    "validate_roster",
    "load_settings",
]
