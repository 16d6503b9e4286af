"""Database models."""

from nota.models.note import NoteRecord
from nota.models.preference import PreferenceRecord

__all__ = ["NoteRecord", "PreferenceRecord"]
