"""Note list, lookup, deletion and search endpoints."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Query

from nota.api.deps import ControllerDep, StoreDep, raise_for_controller
from nota.schemas.note import DeleteResponse, Note, NoteListResponse, SearchRequest
from nota.schemas.state import SessionState
from nota.utils.exceptions import NotaException, NotFoundError

router = APIRouter(prefix="/api", tags=["notes"])


@router.get("/state", response_model=SessionState)
def get_state(controller: ControllerDep) -> SessionState:
    """
    Current session state: note list, open note, search query and results.
    """
    return controller.state


@router.get("/notes", response_model=NoteListResponse)
async def list_notes(
    store: StoreDep,
    q: Annotated[str, Query(max_length=500)] = "",
) -> NoteListResponse:
    """
    List active notes, newest first, optionally filtered by a substring.
    """
    try:
        notes = await asyncio.to_thread(store.search, q)
    except NotaException as e:
        raise e.to_http_exception()
    return NoteListResponse(notes=notes, total=len(notes))


@router.get("/notes/{note_id}", response_model=Note)
async def get_note(note_id: int, store: StoreDep) -> Note:
    """
    Get a single note by ID, active or trashed.
    """
    try:
        note = await asyncio.to_thread(store.get_by_id, note_id)
    except NotaException as e:
        raise e.to_http_exception()
    if note is None:
        raise NotFoundError("Note").to_http_exception()
    return note


@router.delete("/notes/{note_id}", response_model=DeleteResponse)
async def delete_note(
    note_id: int,
    controller: ControllerDep,
    hard: bool = False,
) -> DeleteResponse:
    """
    Move a note to the trash, or delete it permanently with ``hard=true``.
    """
    if not await controller.delete_note(note_id, hard=hard):
        raise_for_controller(controller, f"Could not delete note {note_id}")
    return DeleteResponse(success=True)


@router.post("/search", response_model=SessionState)
async def search_notes(request: SearchRequest, controller: ControllerDep) -> SessionState:
    """
    Set the session's search query. A blank query clears the results.
    """
    await controller.set_query(request.query)
    return controller.state
