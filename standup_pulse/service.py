"""Core orchestration logic for Standup Pulse."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import AckError, NotifyError, SubmissionPostError
from .models import NO_BLOCKERS, NO_RESPONSE, DailyUpdate, SubmissionState
from .store import SubmissionStore, ThreadRegistry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def date_key_for(moment: datetime) -> str:
    """Calendar-date key on the server's UTC clock, not the submitter's."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date().isoformat()


def normalize_answers(
    yesterday: Optional[str], today: Optional[str], blockers: Optional[str]
) -> tuple[str, str, str]:
    """Replace blank answers with defaults; non-blank answers are kept verbatim."""

    def answer_or(value: Optional[str], default: str) -> str:
        return value if value and value.strip() else default

    return (
        answer_or(yesterday, NO_RESPONSE),
        answer_or(today, NO_RESPONSE),
        answer_or(blockers, NO_BLOCKERS),
    )


@dataclass(slots=True)
class SubmissionResult:
    update: DailyUpdate
    date_key: str
    state: SubmissionState
    thread_handle: Optional[str] = None


class StandupService:
    """Collects daily updates and keeps one aggregation thread per day."""

    def __init__(
        self,
        messenger: Any,
        submissions: Optional[SubmissionStore] = None,
        threads: Optional[ThreadRegistry] = None,
        clock: Clock = now_utc,
    ) -> None:
        self.messenger = messenger
        self.submissions = submissions or SubmissionStore()
        self.threads = threads or ThreadRegistry()
        self.clock = clock

    # region Prompts
    async def ask_for_updates(self, user_ids: Iterable[str]) -> List[str]:
        """Send the prompt to each user in turn; returns the ids that were reached."""

        delivered: List[str] = []
        for user_id in user_ids:
            try:
                await self.messenger.notify(user_id)
            except NotifyError as exc:
                logger.error("%s", exc)
                continue
            except Exception as exc:  # noqa: BLE001
                logger.error("Unexpected error notifying %s: %s", user_id, exc)
                continue
            delivered.append(user_id)
        return delivered

    # endregion

    # region Submissions
    async def submit(
        self,
        user_id: str,
        yesterday: Optional[str] = None,
        today: Optional[str] = None,
        blockers: Optional[str] = None,
    ) -> SubmissionResult:
        """Store one user's answers and post them into the day's thread.

        The update is stored before any message is sent, so a failed post or
        acknowledgment leaves it recorded but possibly unposted.
        """

        yesterday, today, blockers = normalize_answers(yesterday, today, blockers)
        submitted_at = self.clock()
        date_key = date_key_for(submitted_at)
        update = DailyUpdate(
            user_id=user_id,
            submitted_at=submitted_at,
            yesterday=yesterday,
            today=today,
            blockers=blockers,
        )
        self.submissions.append(date_key, update)
        result = SubmissionResult(update=update, date_key=date_key, state=SubmissionState.STORED)
        logger.info("Stored update from %s for %s", user_id, date_key)

        try:
            handle = await self.threads.resolve(
                date_key, lambda: self.messenger.post_thread_root(date_key)
            )
        except SubmissionPostError as exc:
            logger.error("%s", exc)
            return result
        result.thread_handle = handle
        result.state = SubmissionState.THREAD_RESOLVED

        display_name = await self.messenger.resolve_display_name(user_id)
        try:
            await self.messenger.post_thread_reply(handle, update, display_name)
        except SubmissionPostError as exc:
            logger.error("%s", exc)
            return result
        result.state = SubmissionState.POSTED

        try:
            await self.messenger.acknowledge(user_id)
        except AckError as exc:
            logger.warning("%s", exc)
            return result
        result.state = SubmissionState.ACKNOWLEDGED
        return result

    # endregion

    # region Query helpers
    def get_daily_updates(self, day: date) -> List[Dict[str, Any]]:
        return [update.to_dict() for update in self.submissions.get(day.isoformat())]

    def get_daily_thread(self, day: date) -> Optional[str]:
        return self.threads.get(day.isoformat())

    def today(self) -> date:
        return date.fromisoformat(date_key_for(self.clock()))

    # endregion


__all__ = [
    "StandupService",
    "SubmissionResult",
    "date_key_for",
    "normalize_answers",
    "now_utc",
]
