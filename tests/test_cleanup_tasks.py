"""Tests for the trash retention job and its scheduler."""

import asyncio
import time
from datetime import timedelta

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from nota.config import Settings
from nota.repositories.note_repository import NoteStore
from nota.scheduler import CLEANUP_JOB_ID, RETRY_JOB_ID, CleanupScheduler
from nota.schemas.note import Note
from nota.tasks.cleanup_tasks import JobOutcome, TrashRetentionJob
from nota.utils.exceptions import StorageError

DAY = 24 * 60 * 60 * 1000
NOW = 100 * DAY


class FailingStore:
    def delete_trash_older_than(self, threshold: int) -> int:
        raise StorageError("database is locked")


class BrokenStore:
    def delete_trash_older_than(self, threshold: int) -> int:
        raise RuntimeError("boom")


class SlowStore:
    def __init__(self):
        self.calls = 0

    def delete_trash_older_than(self, threshold: int) -> int:
        self.calls += 1
        time.sleep(0.2)
        return 0


@pytest.mark.asyncio
async def test_sweep_removes_only_expired_trash(store: NoteStore):
    expired = store.insert(Note(title="expired", created_at=1000))
    recent = store.insert(Note(title="recent", created_at=2000))
    active = store.insert(Note(title="active", created_at=3000))
    store.move_to_trash(expired, NOW - 31 * DAY)
    store.move_to_trash(recent, NOW - DAY)

    job = TrashRetentionJob(store, retention_days=30, clock=lambda: NOW)
    assert await job.run() is JobOutcome.SUCCESS

    assert store.get_by_id(expired) is None
    assert store.get_by_id(recent) is not None
    assert store.get_by_id(active) is not None


@pytest.mark.asyncio
async def test_sweep_keeps_note_exactly_at_threshold(store: NoteStore):
    note_id = store.insert(Note(title="boundary", created_at=1000))
    store.move_to_trash(note_id, NOW - 30 * DAY)

    job = TrashRetentionJob(store, retention_days=30)
    assert await job.run(now=NOW) is JobOutcome.SUCCESS
    assert store.get_by_id(note_id) is not None


@pytest.mark.asyncio
async def test_sweep_on_empty_store_succeeds(store: NoteStore):
    job = TrashRetentionJob(store, clock=lambda: NOW)
    assert await job.run() is JobOutcome.SUCCESS


@pytest.mark.asyncio
@pytest.mark.parametrize("failing", [FailingStore(), BrokenStore()])
async def test_store_failure_requests_retry(failing):
    job = TrashRetentionJob(failing, clock=lambda: NOW)
    assert await job.run() is JobOutcome.RETRY


@pytest.mark.asyncio
async def test_overlapping_run_is_skipped():
    slow = SlowStore()
    job = TrashRetentionJob(slow, clock=lambda: NOW)

    first = asyncio.create_task(job.run())
    await asyncio.sleep(0.05)
    assert await job.run() is JobOutcome.SKIPPED
    assert await first is JobOutcome.SUCCESS
    assert slow.calls == 1


def test_retry_delay_grows_exponentially(tmp_path):
    settings = Settings(data_dir=tmp_path, cleanup_retry_base_seconds=30)
    cleanup = CleanupScheduler(TrashRetentionJob(FailingStore()), settings)

    assert cleanup.retry_delay(0) == timedelta(seconds=30)
    assert cleanup.retry_delay(1) == timedelta(seconds=60)
    assert cleanup.retry_delay(3) == timedelta(seconds=240)


@pytest.mark.asyncio
async def test_failed_run_schedules_retry(tmp_path):
    settings = Settings(data_dir=tmp_path, cleanup_max_retries=3)
    cleanup = CleanupScheduler(
        TrashRetentionJob(FailingStore()), settings, scheduler=AsyncIOScheduler()
    )

    assert await cleanup.run() is JobOutcome.RETRY

    job = cleanup.scheduler.get_job(RETRY_JOB_ID)
    assert job is not None
    assert job.kwargs == {"attempt": 1}


@pytest.mark.asyncio
async def test_retries_stop_after_limit(tmp_path):
    settings = Settings(data_dir=tmp_path, cleanup_max_retries=3)
    cleanup = CleanupScheduler(
        TrashRetentionJob(FailingStore()), settings, scheduler=AsyncIOScheduler()
    )

    assert await cleanup.run(attempt=3) is JobOutcome.RETRY
    assert cleanup.scheduler.get_job(RETRY_JOB_ID) is None


@pytest.mark.asyncio
async def test_successful_run_schedules_nothing(store: NoteStore, tmp_path):
    cleanup = CleanupScheduler(
        TrashRetentionJob(store), Settings(data_dir=tmp_path), scheduler=AsyncIOScheduler()
    )

    assert await cleanup.run() is JobOutcome.SUCCESS
    assert cleanup.scheduler.get_job(RETRY_JOB_ID) is None


@pytest.mark.asyncio
async def test_start_registers_daily_job(store: NoteStore, tmp_path):
    cleanup = CleanupScheduler(
        TrashRetentionJob(store), Settings(data_dir=tmp_path, cleanup_hour=4)
    )
    cleanup.start()
    try:
        job = cleanup.scheduler.get_job(CLEANUP_JOB_ID)
        assert job is not None
        assert job.max_instances == 1
        assert job.coalesce is True
    finally:
        await cleanup.shutdown()
    assert not cleanup.scheduler.running


@pytest.mark.asyncio
async def test_shutdown_without_start_is_noop(store: NoteStore, tmp_path):
    cleanup = CleanupScheduler(TrashRetentionJob(store), Settings(data_dir=tmp_path))

    await cleanup.shutdown()
    assert not cleanup.scheduler.running
