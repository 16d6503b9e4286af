"""Trash endpoints."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Query

from nota.api.deps import ControllerDep, StoreDep, raise_for_controller
from nota.schemas.note import DeleteResponse, NoteListResponse
from nota.utils.exceptions import NotaException

router = APIRouter(prefix="/api/trash", tags=["trash"])


@router.get("", response_model=NoteListResponse)
async def list_trash(
    store: StoreDep,
    q: Annotated[str, Query(max_length=500)] = "",
) -> NoteListResponse:
    """
    List trashed notes, newest first.
    """
    try:
        notes = await asyncio.to_thread(store.list_trash, q)
    except NotaException as e:
        raise e.to_http_exception()
    return NoteListResponse(notes=notes, total=len(notes))


@router.post("/{note_id}/restore")
async def restore_note(note_id: int, controller: ControllerDep) -> dict:
    if not await controller.restore_note(note_id):
        raise_for_controller(controller, f"Could not restore note {note_id}")
    return {"success": True}


@router.delete("", response_model=DeleteResponse)
async def empty_trash(store: StoreDep) -> DeleteResponse:
    """
    Permanently delete every trashed note.
    """
    try:
        deleted = await asyncio.to_thread(store.empty_trash)
    except NotaException as e:
        raise e.to_http_exception()
    return DeleteResponse(success=True, deleted=deleted)
