"""Periodic driver that sends standup prompts at each user's local time."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from .errors import ConfigurationError
from .models import ScheduleSpec, UserConfig
from .schedule import should_notify

logger = logging.getLogger(__name__)

RosterLoader = Callable[[], List[UserConfig]]
Notify = Callable[[str], Awaitable[None]]

# Wake slightly after the boundary so the wall clock has crossed it.
_WAKE_SLACK_SECONDS = 0.05


def seconds_until_next_tick(now: datetime, interval: int) -> float:
    remainder = now.timestamp() % interval
    return interval - remainder + _WAKE_SLACK_SECONDS


class TickDriver:
    """Evaluates the schedule for every roster user once per tick.

    Each wall-clock minute is evaluated at most once, so cadences shorter
    than a minute do not repeat a prompt. A minute the process is not
    running for is never caught up.
    """

    def __init__(
        self,
        schedule: ScheduleSpec,
        roster_loader: RosterLoader,
        notify: Notify,
        *,
        interval_seconds: int = 60,
        notify_timeout: float = 30.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        if not 0 < notify_timeout < interval_seconds:
            raise ConfigurationError("notify timeout must be shorter than the tick interval")
        self.schedule = schedule
        self.roster_loader = roster_loader
        self.notify = notify
        self.interval_seconds = interval_seconds
        self.notify_timeout = notify_timeout
        self.clock = clock
        self._last_minute: Optional[datetime] = None

    def due_users(self, instant: datetime) -> List[UserConfig]:
        due: List[UserConfig] = []
        for user in self.roster_loader():
            try:
                if should_notify(self.schedule, user.timezone, instant):
                    due.append(user)
            except ConfigurationError as exc:
                logger.warning("Skipping %s: %s", user.user_id, exc)
        return due

    async def run_tick(self, instant: Optional[datetime] = None) -> List[UserConfig]:
        """Notify every user whose local time matches the schedule at ``instant``."""

        instant = instant or self.clock()
        minute = instant.replace(second=0, microsecond=0)
        if minute == self._last_minute:
            return []
        self._last_minute = minute

        due = self.due_users(instant)
        if not due:
            return []

        logger.info("Running scheduled standup for %s user(s)", len(due))
        results = await asyncio.gather(
            *(self._notify_one(user) for user in due), return_exceptions=True
        )
        notified: List[UserConfig] = []
        for user, outcome in zip(due, results):
            if isinstance(outcome, BaseException):
                logger.error("Failed to notify %s (%s): %s", user.user_id, user.timezone, outcome)
                continue
            notified.append(user)
        if notified:
            logger.info(
                "Standup questions sent to: %s",
                ", ".join(f"{user.user_id} ({user.timezone})" for user in notified),
            )
        return notified

    async def _notify_one(self, user: UserConfig) -> None:
        try:
            await asyncio.wait_for(self.notify(user.user_id), timeout=self.notify_timeout)
        except asyncio.TimeoutError as exc:
            raise TimeoutError(f"notify timed out after {self.notify_timeout}s") from exc

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_tick()
            except Exception:  # noqa: BLE001
                logger.exception("Standup tick failed")
            await asyncio.sleep(seconds_until_next_tick(self.clock(), self.interval_seconds))


__all__ = ["TickDriver", "seconds_until_next_tick"]
