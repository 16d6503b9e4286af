"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from nota.repositories.note_repository import NoteStore
from nota.repositories.preferences_repository import PreferencesStore
from nota.schemas.state import ErrorNotice
from nota.services.backup import BackupService
from nota.services.note_controller import NoteController
from nota.utils.exceptions import (
    ConstraintError,
    NotaException,
    NotFoundError,
    ParseError,
    StorageError,
)


def get_store(request: Request) -> NoteStore:
    """Note store created by the application lifespan."""
    return request.app.state.store


def get_controller(request: Request) -> NoteController:
    return request.app.state.controller


def get_preferences(request: Request) -> PreferencesStore:
    return request.app.state.preferences


def get_backup_service(request: Request) -> BackupService:
    return request.app.state.backup


StoreDep = Annotated[NoteStore, Depends(get_store)]
ControllerDep = Annotated[NoteController, Depends(get_controller)]
PreferencesDep = Annotated[PreferencesStore, Depends(get_preferences)]
BackupDep = Annotated[BackupService, Depends(get_backup_service)]


def exception_for(notice: ErrorNotice) -> NotaException:
    """Rebuild the domain exception a controller reported in its state."""
    if notice.kind == NotFoundError.kind:
        return NotFoundError(detail=notice.message)
    kinds: dict[str, type[NotaException]] = {
        ConstraintError.kind: ConstraintError,
        StorageError.kind: StorageError,
        ParseError.kind: ParseError,
    }
    return kinds.get(notice.kind, NotaException)(notice.message)


def raise_for_controller(controller: NoteController, fallback: str) -> None:
    """
    Translate a failed controller command into an HTTP error.

    Raises:
        HTTPException: Always; from the state's error, its notice, or ``fallback``
    """
    state = controller.state
    if state.error is not None:
        raise exception_for(state.error).to_http_exception()
    if state.notice is not None:
        raise NotFoundError(detail=state.notice).to_http_exception()
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=fallback)
