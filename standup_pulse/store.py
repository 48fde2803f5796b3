"""In-memory stores for submitted updates and daily thread handles.

Both stores live for the process lifetime. Nothing is persisted or evicted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from .models import DailyUpdate

logger = logging.getLogger(__name__)


class SubmissionStore:
    """Append-only mapping from date key to the updates received that day."""

    def __init__(self) -> None:
        self._updates: Dict[str, List[DailyUpdate]] = {}

    def append(self, date_key: str, update: DailyUpdate) -> None:
        self._updates.setdefault(date_key, []).append(update)

    def get(self, date_key: str) -> Tuple[DailyUpdate, ...]:
        return tuple(self._updates.get(date_key, ()))

    def date_keys(self) -> List[str]:
        return sorted(self._updates)

    def __len__(self) -> int:
        return sum(len(updates) for updates in self._updates.values())


class ThreadRegistry:
    """Maps a date key to the handle of that day's thread root.

    The first caller for a date reserves the slot and creates the root;
    every concurrent or later caller receives the same handle. The lock
    only guards the existence check and the reservation, never the
    network call that creates the root.
    """

    def __init__(self) -> None:
        self._handles: Dict[str, str] = {}
        self._pending: Dict[str, asyncio.Future[str]] = {}
        self._lock = asyncio.Lock()

    def get(self, date_key: str) -> Optional[str]:
        return self._handles.get(date_key)

    def items(self) -> Dict[str, str]:
        return dict(self._handles)

    async def resolve(self, date_key: str, create: Callable[[], Awaitable[str]]) -> str:
        async with self._lock:
            handle = self._handles.get(date_key)
            if handle is not None:
                return handle
            reservation = self._pending.get(date_key)
            owner = reservation is None
            if owner:
                reservation = asyncio.get_running_loop().create_future()
                self._pending[date_key] = reservation

        if not owner:
            return await asyncio.shield(reservation)

        try:
            handle = await create()
        except asyncio.CancelledError:
            self._pending.pop(date_key, None)
            reservation.cancel()
            raise
        except Exception as exc:
            self._pending.pop(date_key, None)
            reservation.set_exception(exc)
            # Mark retrieved so an unawaited reservation does not warn.
            reservation.exception()
            raise

        # Publishing never awaits, so the owner cannot be cancelled between
        # creating the root and recording it. Only the owner writes this key.
        self._handles.setdefault(date_key, handle)
        self._pending.pop(date_key, None)
        handle = self._handles[date_key]
        logger.info("Created daily thread %s for %s", handle, date_key)
        reservation.set_result(handle)
        return handle


__all__ = ["SubmissionStore", "ThreadRegistry"]
