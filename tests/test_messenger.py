"""Tests for SlackMessenger against a mocked Slack Web API."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from standup_pulse.errors import AckError, NotifyError, SubmissionPostError
from standup_pulse.messages import ACK_TEXT, MODAL_CALLBACK_ID, SUBMIT_ACTION_ID
from standup_pulse.messenger import UNKNOWN_USER, SlackMessenger
from standup_pulse.models import DailyUpdate
from standup_pulse.slack_client import SlackClient

pytestmark = pytest.mark.asyncio


class SlackStub:
    """Records requests and answers with canned Slack responses."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content) if request.content else dict(request.url.params)
        self.requests.append((method, body))
        status_code, payload = self.responses.get(method, (200, {"ok": True, "ts": "1717405200.000100"}))
        return httpx.Response(status_code, json=payload)


def make_messenger(stub: SlackStub) -> SlackMessenger:
    client = SlackClient("xoxb-test", transport=httpx.MockTransport(stub))
    return SlackMessenger(client, "C123")


def make_update() -> DailyUpdate:
    return DailyUpdate(
        user_id="U1",
        submitted_at=datetime(2024, 6, 3, 13, 0, tzinfo=timezone.utc),
        yesterday="shipped parser",
        today="tick driver",
        blockers="None",
    )


class TestNotify:
    async def test_sends_prompt_with_submit_button(self):
        stub = SlackStub()
        await make_messenger(stub).notify("U1")

        method, body = stub.requests[0]
        assert method == "chat.postMessage"
        assert body["channel"] == "U1"
        assert body["blocks"][-1]["elements"][0]["action_id"] == SUBMIT_ACTION_ID

    async def test_slack_error_becomes_notify_error(self):
        stub = SlackStub({"chat.postMessage": (200, {"ok": False, "error": "user_not_found"})})
        with pytest.raises(NotifyError, match="user_not_found"):
            await make_messenger(stub).notify("U1")

    async def test_transport_error_becomes_notify_error(self):
        def broken(request):
            raise httpx.ConnectError("boom", request=request)

        client = SlackClient("xoxb-test", transport=httpx.MockTransport(broken))
        with pytest.raises(NotifyError):
            await SlackMessenger(client, "C123").notify("U1")

    async def test_non_json_body_becomes_notify_error(self):
        def gateway(request):
            return httpx.Response(200, text="<html>upstream error</html>")

        client = SlackClient("xoxb-test", transport=httpx.MockTransport(gateway))
        with pytest.raises(NotifyError, match="invalid_json"):
            await SlackMessenger(client, "C123").notify("U1")


class TestThreadPosts:
    async def test_root_non_json_body_becomes_post_error(self):
        def gateway(request):
            return httpx.Response(200, text="<html>upstream error</html>")

        client = SlackClient("xoxb-test", transport=httpx.MockTransport(gateway))
        with pytest.raises(SubmissionPostError, match="invalid_json"):
            await SlackMessenger(client, "C123").post_thread_root("2024-06-03")

    async def test_root_returns_ts(self):
        stub = SlackStub()
        handle = await make_messenger(stub).post_thread_root("2024-06-03")

        assert handle == "1717405200.000100"
        method, body = stub.requests[0]
        assert body["channel"] == "C123"
        assert body["text"] == "Daily Standup Updates - 2024-06-03"
        assert body["blocks"][0]["text"]["text"] == "Update, Jun 3"

    async def test_root_without_ts_fails(self):
        stub = SlackStub({"chat.postMessage": (200, {"ok": True})})
        with pytest.raises(SubmissionPostError):
            await make_messenger(stub).post_thread_root("2024-06-03")

    async def test_reply_goes_into_thread(self):
        stub = SlackStub()
        await make_messenger(stub).post_thread_reply("1717405200.000100", make_update(), "Ada")

        _, body = stub.requests[0]
        assert body["thread_ts"] == "1717405200.000100"
        assert body["text"] == "Update from Ada"
        assert body["blocks"][0]["text"]["text"] == "Ada"
        assert body["blocks"][2]["text"]["text"] == "*Today:*\ntick driver"

    async def test_reply_http_error(self):
        stub = SlackStub({"chat.postMessage": (500, {"ok": False})})
        with pytest.raises(SubmissionPostError):
            await make_messenger(stub).post_thread_reply("ts", make_update(), "Ada")


class TestAcknowledge:
    async def test_sends_confirmation(self):
        stub = SlackStub()
        await make_messenger(stub).acknowledge("U1")
        assert stub.requests[0][1] == {"channel": "U1", "text": ACK_TEXT}

    async def test_failure_becomes_ack_error(self):
        stub = SlackStub({"chat.postMessage": (200, {"ok": False, "error": "channel_not_found"})})
        with pytest.raises(AckError):
            await make_messenger(stub).acknowledge("U1")


class TestDisplayName:
    async def test_prefers_real_name(self):
        stub = SlackStub({"users.info": (200, {"ok": True, "user": {"name": "ada", "real_name": "Ada L"}})})
        assert await make_messenger(stub).resolve_display_name("U1") == "Ada L"
        assert stub.requests[0] == ("users.info", {"user": "U1"})

    async def test_falls_back_to_name(self):
        stub = SlackStub({"users.info": (200, {"ok": True, "user": {"name": "ada"}})})
        assert await make_messenger(stub).resolve_display_name("U1") == "ada"

    async def test_failure_uses_placeholder(self):
        stub = SlackStub({"users.info": (200, {"ok": False, "error": "user_not_found"})})
        assert await make_messenger(stub).resolve_display_name("U1") == UNKNOWN_USER


class TestUpdateForm:
    async def test_opens_modal(self):
        stub = SlackStub()
        await make_messenger(stub).open_update_form("trigger-1")

        method, body = stub.requests[0]
        assert method == "views.open"
        assert body["trigger_id"] == "trigger-1"
        assert body["view"]["callback_id"] == MODAL_CALLBACK_ID
        assert [b["optional"] for b in body["view"]["blocks"]] == [False, False, True]
