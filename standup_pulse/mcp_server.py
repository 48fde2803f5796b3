"""MCP server exposing Standup Pulse data tools."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, List, Optional

from mcp.server.fastmcp import FastMCP

from .models import UserConfig
from .service import StandupService


def _ensure_date(service: StandupService, day_str: Optional[str] = None) -> date:
    if not day_str:
        return service.today()
    try:
        return datetime.strptime(day_str, "%Y-%m-%d").date()
    except ValueError as exc:  # noqa: TRY003
        raise ValueError("Invalid date format. Use YYYY-MM-DD.") from exc


def create_mcp(service: StandupService, roster_loader: Callable[[], List[UserConfig]]) -> FastMCP:
    """Build the MCP tool server over the running service's in-memory stores."""

    mcp = FastMCP("standup-pulse")

    @mcp.tool()
    async def get_daily_updates(date: Optional[str] = None) -> dict:
        """Return the standup updates submitted on the date (default today)."""

        day = _ensure_date(service, date)
        return {"date": day.isoformat(), "updates": service.get_daily_updates(day)}

    @mcp.tool()
    async def get_daily_thread(date: Optional[str] = None) -> dict:
        """Return the handle of the date's aggregation thread, if one was started."""

        day = _ensure_date(service, date)
        return {"date": day.isoformat(), "thread": service.get_daily_thread(day)}

    @mcp.tool()
    async def trigger_standup() -> dict:
        """Send the standup prompt to every user on the roster now."""

        user_ids = [user.user_id for user in roster_loader()]
        delivered = await service.ask_for_updates(user_ids)
        return {"requested": len(user_ids), "delivered": delivered}

    return mcp


__all__ = ["create_mcp"]
