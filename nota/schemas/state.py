"""Session state schemas."""

from pydantic import BaseModel, ConfigDict

from nota.schemas.note import Note


class ErrorNotice(BaseModel):
    """A failed command, surfaced to state observers."""

    model_config = ConfigDict(frozen=True)

    kind: str
    message: str
    retryable: bool = False


class SessionState(BaseModel):
    """Snapshot of the note lifecycle session. Never mutated in place."""

    model_config = ConfigDict(frozen=True)

    items: tuple[Note, ...] = ()
    editing: Note | None = None
    query: str = ""
    searching: bool = False
    results: tuple[Note, ...] = ()
    error: ErrorNotice | None = None
    notice: str | None = None
