"""Slack-backed messaging capabilities used by the standup service."""

from __future__ import annotations

import logging

import httpx

from .errors import AckError, NotifyError, SubmissionPostError
from .messages import (
    ACK_TEXT,
    PROMPT_TEXT,
    build_prompt_blocks,
    build_root_blocks,
    build_update_blocks,
    build_update_modal,
    root_text,
)
from .models import DailyUpdate
from .slack_client import SlackApiError, SlackClient

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"


class SlackMessenger:
    """Maps the service's messaging needs onto Slack Web API calls.

    Transport failures are re-raised as the matching Standup Pulse error so
    callers never see httpx or Slack specifics.
    """

    def __init__(self, client: SlackClient, channel_id: str) -> None:
        self.client = client
        self.channel_id = channel_id

    async def notify(self, user_id: str) -> None:
        try:
            await self.client.post_message(user_id, PROMPT_TEXT, blocks=build_prompt_blocks())
        except (SlackApiError, httpx.HTTPError) as exc:
            raise NotifyError(user_id, str(exc)) from exc

    async def open_update_form(self, trigger_id: str) -> None:
        await self.client.open_view(trigger_id, build_update_modal())

    async def post_thread_root(self, date_key: str) -> str:
        try:
            data = await self.client.post_message(
                self.channel_id, root_text(date_key), blocks=build_root_blocks(date_key)
            )
        except (SlackApiError, httpx.HTTPError) as exc:
            raise SubmissionPostError(date_key, str(exc)) from exc
        handle = data.get("ts")
        if not handle:
            raise SubmissionPostError(date_key, "chat.postMessage returned no ts")
        return handle

    async def post_thread_reply(self, thread_handle: str, update: DailyUpdate, display_name: str) -> None:
        try:
            await self.client.post_message(
                self.channel_id,
                f"Update from {display_name}",
                blocks=build_update_blocks(update, display_name),
                thread_ts=thread_handle,
            )
        except (SlackApiError, httpx.HTTPError) as exc:
            raise SubmissionPostError(update.submitted_at.date().isoformat(), str(exc)) from exc

    async def acknowledge(self, user_id: str) -> None:
        try:
            await self.client.post_message(user_id, ACK_TEXT)
        except (SlackApiError, httpx.HTTPError) as exc:
            raise AckError(user_id, str(exc)) from exc

    async def resolve_display_name(self, user_id: str) -> str:
        try:
            user = await self.client.fetch_user(user_id)
        except (SlackApiError, httpx.HTTPError) as exc:
            logger.warning("Could not resolve display name for %s: %s", user_id, exc)
            return UNKNOWN_USER
        return user.get("real_name") or user.get("name") or UNKNOWN_USER


__all__ = ["SlackMessenger", "UNKNOWN_USER"]
