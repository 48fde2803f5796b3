"""HTTP client for interacting with Slack Web API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

SLACK_API_BASE = "https://slack.com/api"


class SlackApiError(RuntimeError):
    """Raised when Slack returns an error response."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"Slack API error for {method}: {error}")
        self.method = method
        self.error = error


class SlackClient:
    """Simple async wrapper around Slack Web API endpoints used by Standup Pulse."""

    def __init__(
        self,
        token: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=SLACK_API_BASE,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _check(self, method: str, response: httpx.Response) -> dict[str, Any]:
        if response.status_code >= 400:
            raise SlackApiError(method, f"http_{response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise SlackApiError(method, "invalid_json") from exc
        if not isinstance(data, dict):
            raise SlackApiError(method, "invalid_json")
        if not data.get("ok"):
            raise SlackApiError(method, data.get("error", "unknown_error"))
        return data

    async def post_message(
        self,
        channel: str,
        text: str,
        *,
        blocks: Optional[List[Dict[str, Any]]] = None,
        thread_ts: Optional[str] = None,
    ) -> dict[str, Any]:
        """Send a message via `chat.postMessage`; a user id as channel opens a DM."""

        method = "chat.postMessage"
        payload: Dict[str, Any] = {"channel": channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        if thread_ts:
            payload["thread_ts"] = thread_ts
        response = await self._client.post(method, json=payload)
        return self._check(method, response)

    async def open_view(self, trigger_id: str, view: Dict[str, Any]) -> dict[str, Any]:
        method = "views.open"
        response = await self._client.post(method, json={"trigger_id": trigger_id, "view": view})
        return self._check(method, response)

    async def fetch_user(self, user_id: str) -> dict[str, Any]:
        method = "users.info"
        response = await self._client.get(method, params={"user": user_id})
        data = self._check(method, response)
        return data.get("user") or {}


__all__ = ["SlackClient", "SlackApiError", "SLACK_API_BASE"]
