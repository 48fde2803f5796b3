"""FastAPI application exposing Slack endpoints and the Standup Pulse read API."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

from fastapi import BackgroundTasks, Depends, FastAPI, Header, HTTPException, Request, Response, status

from .config import Settings, load_roster, load_settings
from .mcp_server import create_mcp
from .messages import MODAL_CALLBACK_ID, SUBMIT_ACTION_ID, extract_form_answers
from .messenger import SlackMessenger
from .scheduler import TickDriver
from .service import StandupService
from .slack_client import SlackClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    messenger: Any = None,
    service: Optional[StandupService] = None,
    start_scheduler: bool = True,
) -> FastAPI:
    settings = settings or load_settings()
    slack_client: Optional[SlackClient] = None
    if messenger is None:
        slack_client = SlackClient(settings.slack_bot_token)
        messenger = SlackMessenger(slack_client, settings.notifications_channel_id)
    service = service or StandupService(messenger)

    def current_roster():
        return load_roster(default_timezone=settings.default_timezone)

    driver = TickDriver(
        settings.schedule,
        current_roster,
        messenger.notify,
        interval_seconds=settings.tick_interval_seconds,
        notify_timeout=settings.notify_timeout_seconds,
    )
    started_at = time.monotonic()
    background: Dict[str, asyncio.Task] = {}

    async def verify_api_key(x_api_key: Optional[str] = Header(None, alias="X-API-Key")) -> None:
        if not settings.api_key:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="API key is not configured")
        if x_api_key != settings.api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")

    def date_dependency(value: Optional[str] = None) -> date:
        if not value:
            return service.today()
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD") from exc

    async def slack_form(request: Request) -> Dict[str, str]:
        body = (await request.body()).decode("utf-8")
        return {key: values[0] for key, values in parse_qs(body).items()}

    app = FastAPI(title="Standup Pulse API", version="1.0.0")
    app.state.service = service
    app.state.driver = driver

    @app.on_event("startup")
    async def startup_event() -> None:  # pragma: no cover - io bound
        logger.info("Scheduled standup: %s", settings.schedule_expression)
        roster = current_roster()
        logger.info("Target users: %s", len(roster))
        for user in roster:
            logger.info("   - %s: %s", user.user_id, user.timezone)
        if start_scheduler:
            background["driver"] = asyncio.create_task(driver.run_forever())

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        task = background.pop("driver", None)
        if task:
            task.cancel()
        if slack_client:
            await slack_client.close()

    def get_service() -> StandupService:
        return service

    @app.get("/")
    @app.get("/health")
    async def healthcheck() -> dict[str, object]:
        """Lightweight readiness probe for platform monitors."""

        return {
            "status": "ok",
            "uptime": round(time.monotonic() - started_at, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.post("/slack/commands")
    async def slack_command(
        background_tasks: BackgroundTasks,
        form: Dict[str, str] = Depends(slack_form),
        svc: StandupService = Depends(get_service),
    ) -> dict[str, str]:
        if form.get("command") != "/standup":
            raise HTTPException(status_code=400, detail="unsupported command")
        user_ids = [user.user_id for user in current_roster()]
        if not user_ids:
            return {
                "response_type": "ephemeral",
                "text": "⚠️ No target users configured. Please set TARGET_USERS in your .env file.",
            }
        background_tasks.add_task(svc.ask_for_updates, user_ids)
        return {
            "response_type": "ephemeral",
            "text": f"✅ Standup questions sent to {len(user_ids)} user(s).",
        }

    @app.post("/slack/interactions")
    async def slack_interaction(
        background_tasks: BackgroundTasks,
        form: Dict[str, str] = Depends(slack_form),
        svc: StandupService = Depends(get_service),
    ) -> Response:
        try:
            payload = json.loads(form["payload"])
        except (KeyError, json.JSONDecodeError) as exc:
            raise HTTPException(status_code=400, detail="missing interaction payload") from exc

        kind = payload.get("type")
        if kind == "block_actions":
            action_ids = {action.get("action_id") for action in payload.get("actions", [])}
            if SUBMIT_ACTION_ID in action_ids:
                try:
                    await messenger.open_update_form(payload["trigger_id"])
                except Exception as exc:  # noqa: BLE001
                    logger.error("Error opening modal: %s", exc)
        elif kind == "view_submission" and payload.get("view", {}).get("callback_id") == MODAL_CALLBACK_ID:
            answers = extract_form_answers(payload["view"].get("state", {}).get("values", {}))
            background_tasks.add_task(svc.submit, payload["user"]["id"], **answers)
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/api/updates")
    async def get_daily_updates(
        date_param: Optional[str] = None,
        _: None = Depends(verify_api_key),
        svc: StandupService = Depends(get_service),
    ) -> dict[str, object]:
        day = date_dependency(date_param)
        return {
            "date": day.isoformat(),
            "thread": svc.get_daily_thread(day),
            "updates": svc.get_daily_updates(day),
        }

    @app.get("/api/roster")
    async def get_roster(_: None = Depends(verify_api_key)) -> dict[str, object]:
        return {
            "schedule": settings.schedule_expression,
            "users": [{"user_id": u.user_id, "timezone": u.timezone} for u in current_roster()],
        }

    app.mount("/mcp", create_mcp(service, current_roster).sse_app())
    return app


__all__ = ["create_app"]
