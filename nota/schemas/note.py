"""Note schemas."""

from pydantic import BaseModel, ConfigDict


class Note(BaseModel):
    """
    Immutable note value.

    ``id == 0`` marks a draft that has never been persisted.
    Timestamps are epoch milliseconds.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = 0
    title: str = ""
    body: str = ""
    created_at: int = 0
    deleted_at: int | None = None

    @property
    def is_draft(self) -> bool:
        return self.id == 0

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_blank(self) -> bool:
        return not self.title.strip() and not self.body.strip()


class EditorUpdate(BaseModel):
    """Schema for patching the note open in the editor."""

    title: str | None = None
    body: str | None = None


class NewNoteRequest(BaseModel):
    """Schema for starting a new draft."""

    title: str = ""


class SearchRequest(BaseModel):
    """Schema for search requests."""

    query: str = ""


class NoteListResponse(BaseModel):
    """Schema for note lists."""

    notes: list[Note]
    total: int


class ImportResponse(BaseModel):
    """Schema for backup import results."""

    imported: int


class DeleteResponse(BaseModel):
    """Schema for deletion results."""

    success: bool
    deleted: int = 1


class InternalBackupResponse(BaseModel):
    """Schema for a written internal backup."""

    path: str
    notes: int
