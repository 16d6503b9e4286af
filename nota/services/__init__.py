"""Service modules for business logic."""

from nota.services.backup import BackupService
from nota.services.note_controller import NoteController

__all__ = [
    "BackupService",
    "NoteController",
]
