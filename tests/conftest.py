"""
Pytest configuration and fixtures for Standup Pulse tests.

Provides:
- A fake messenger recording every outbound Slack call
- Settings built without touching the environment
- A service wired to the fake messenger and a fixed clock
"""

import asyncio
from datetime import datetime, timezone

import pytest

from standup_pulse.config import Settings
from standup_pulse.errors import AckError, NotifyError, SubmissionPostError
from standup_pulse.schedule import parse_schedule
from standup_pulse.service import StandupService

FIXED_NOW = datetime(2024, 6, 3, 13, 0, tzinfo=timezone.utc)


class FakeMessenger:
    """In-memory stand-in for SlackMessenger."""

    def __init__(self, root_delay: float = 0.0) -> None:
        self.root_delay = root_delay
        self.notified: list[str] = []
        self.roots: list[str] = []
        self.replies: list[tuple[str, str, str]] = []
        self.acks: list[str] = []
        self.forms: list[str] = []
        self.fail_notify: set[str] = set()
        self.fail_root = False
        self.fail_reply = False
        self.fail_ack = False

    async def notify(self, user_id: str) -> None:
        if user_id in self.fail_notify:
            raise NotifyError(user_id, "channel_not_found")
        self.notified.append(user_id)

    async def open_update_form(self, trigger_id: str) -> None:
        self.forms.append(trigger_id)

    async def post_thread_root(self, date_key: str) -> str:
        await asyncio.sleep(self.root_delay)
        if self.fail_root:
            raise SubmissionPostError(date_key, "rate_limited")
        self.roots.append(date_key)
        return f"ts-{date_key}-{len(self.roots)}"

    async def post_thread_reply(self, thread_handle, update, display_name) -> None:
        if self.fail_reply:
            raise SubmissionPostError(update.submitted_at.date().isoformat(), "rate_limited")
        self.replies.append((thread_handle, update.user_id, display_name))

    async def acknowledge(self, user_id: str) -> None:
        if self.fail_ack:
            raise AckError(user_id, "channel_not_found")
        self.acks.append(user_id)

    async def resolve_display_name(self, user_id: str) -> str:
        return f"Name {user_id}"


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def service(messenger: FakeMessenger) -> StandupService:
    return StandupService(messenger, clock=lambda: FIXED_NOW)


@pytest.fixture
def settings() -> Settings:
    expression = "0 9 * * 1-5"
    return Settings(
        slack_bot_token="xoxb-test",
        notifications_channel_id="C123",
        schedule_expression=expression,
        schedule=parse_schedule(expression),
        api_key="secret",
    )
