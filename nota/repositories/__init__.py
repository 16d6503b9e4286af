"""Persistence layer."""

from nota.repositories.note_repository import NoteStore
from nota.repositories.preferences_repository import PreferencesStore

__all__ = ["NoteStore", "PreferencesStore"]
