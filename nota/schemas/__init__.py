"""Pydantic schemas for values, requests and responses."""

from nota.schemas.note import (
    DeleteResponse,
    EditorUpdate,
    ImportResponse,
    InternalBackupResponse,
    NewNoteRequest,
    Note,
    NoteListResponse,
    SearchRequest,
)
from nota.schemas.settings import (
    AccessibleSizes,
    TextSizeLevel,
    TextSizeResponse,
    TextSizeUpdate,
)
from nota.schemas.state import ErrorNotice, SessionState

__all__ = [
    "DeleteResponse",
    "EditorUpdate",
    "ImportResponse",
    "InternalBackupResponse",
    "NewNoteRequest",
    "Note",
    "NoteListResponse",
    "SearchRequest",
    "AccessibleSizes",
    "TextSizeLevel",
    "TextSizeResponse",
    "TextSizeUpdate",
    "ErrorNotice",
    "SessionState",
]
