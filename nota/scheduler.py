"""Scheduler host for the trash retention sweep."""

import asyncio
import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from nota.config import Settings
from nota.tasks.cleanup_tasks import JobOutcome, TrashRetentionJob
from nota.utils.datetime import utc_now

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "trash_cleanup"
RETRY_JOB_ID = "trash_cleanup_retry"


class CleanupScheduler:
    """Runs the retention job daily and reschedules it with backoff when it asks for a retry."""

    def __init__(
        self,
        job: TrashRetentionJob,
        settings: Settings,
        scheduler: AsyncIOScheduler | None = None,
    ):
        self.job = job
        self.settings = settings
        self.scheduler = scheduler or AsyncIOScheduler()

    def start(self) -> None:
        self.scheduler.add_job(
            self.run,
            "cron",
            hour=self.settings.cleanup_hour,
            id=CLEANUP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(f"Scheduled daily trash cleanup at {self.settings.cleanup_hour}:00")

    async def shutdown(self) -> None:
        """Stop the scheduler. Newer APScheduler releases apply this on the next loop turn."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            await asyncio.sleep(0)

    async def run(self, attempt: int = 0) -> JobOutcome:
        outcome = await self.job.run()
        if outcome is JobOutcome.RETRY:
            self._schedule_retry(attempt)
        return outcome

    def retry_delay(self, attempt: int) -> timedelta:
        return timedelta(seconds=self.settings.cleanup_retry_base_seconds * 2**attempt)

    def _schedule_retry(self, attempt: int) -> None:
        if attempt >= self.settings.cleanup_max_retries:
            logger.error(
                f"Trash cleanup failed {attempt + 1} times, waiting for the next daily run"
            )
            return

        run_date = utc_now() + self.retry_delay(attempt)
        try:
            self.scheduler.add_job(
                self.run,
                "date",
                run_date=run_date,
                kwargs={"attempt": attempt + 1},
                id=RETRY_JOB_ID,
                replace_existing=True,
                max_instances=1,
            )
            logger.info(f"Retrying trash cleanup at {run_date}")
        except Exception as e:
            logger.error(f"Failed to schedule trash cleanup retry: {e}")
