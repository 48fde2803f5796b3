"""Dataclasses representing Standup Pulse domain models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet

NO_RESPONSE = "No response"
NO_BLOCKERS = "None"


@dataclass(frozen=True, slots=True)
class UserConfig:
    user_id: str
    timezone: str


@dataclass(frozen=True, slots=True)
class ScheduleSpec:
    """Target minute and hour plus the weekdays (0 = Sunday) a prompt fires on."""

    minute: int
    hour: int
    weekdays: FrozenSet[int]


@dataclass(frozen=True, slots=True)
class DailyUpdate:
    user_id: str
    submitted_at: datetime
    yesterday: str
    today: str
    blockers: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["submitted_at"] = self.submitted_at.isoformat()
        return data


class SubmissionState(str, Enum):
    """Progress of a single submission; transitions only move forward."""

    RECEIVED = "received"
    NORMALIZED = "normalized"
    STORED = "stored"
    THREAD_RESOLVED = "thread_resolved"
    POSTED = "posted"
    ACKNOWLEDGED = "acknowledged"


__all__ = [
    "NO_RESPONSE",
    "NO_BLOCKERS",
    "UserConfig",
    "ScheduleSpec",
    "DailyUpdate",
    "SubmissionState",
]
