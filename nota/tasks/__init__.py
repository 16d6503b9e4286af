"""Background tasks module."""

from nota.tasks.cleanup_tasks import JobOutcome, TrashRetentionJob

__all__ = ["JobOutcome", "TrashRetentionJob"]
