"""Scheduled trash retention sweep."""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from nota.repositories.note_repository import NoteStore
from nota.utils.datetime import days_ago_millis, now_millis
from nota.utils.exceptions import NotaException

logger = logging.getLogger(__name__)


class JobOutcome(str, Enum):
    SUCCESS = "success"
    RETRY = "retry"
    SKIPPED = "skipped"


class TrashRetentionJob:
    """Permanently delete notes that have been in the trash longer than the retention window."""

    def __init__(
        self,
        store: NoteStore,
        retention_days: int = 30,
        clock: Callable[[], int] = now_millis,
    ):
        self.store = store
        self.retention_days = retention_days
        self.clock = clock
        self._running = asyncio.Lock()

    async def run(self, now: int | None = None) -> JobOutcome:
        """
        Run one sweep.

        Returns SKIPPED when a sweep is already in flight and RETRY when the
        store failed; never raises.
        """
        if self._running.locked():
            logger.info("Trash cleanup already running, skipping this tick")
            return JobOutcome.SKIPPED

        async with self._running:
            threshold = days_ago_millis(
                self.retention_days, self.clock() if now is None else now
            )
            try:
                deleted = await asyncio.to_thread(
                    self.store.delete_trash_older_than, threshold
                )
            except NotaException as e:
                logger.warning(f"Trash cleanup failed, will retry: {e.detail}")
                return JobOutcome.RETRY
            except Exception as e:
                logger.exception(f"Unexpected trash cleanup failure: {e}")
                return JobOutcome.RETRY

        logger.info(f"Trash cleanup removed {deleted} notes")
        return JobOutcome.SUCCESS
