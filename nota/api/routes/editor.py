"""Editor endpoints: the note currently open in the session."""

from fastapi import APIRouter, HTTPException, status

from nota.api.deps import ControllerDep, raise_for_controller
from nota.schemas.note import EditorUpdate, NewNoteRequest, Note
from nota.services.note_controller import NoteController

router = APIRouter(prefix="/api/editor", tags=["editor"])


def _no_open_note() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No note is open")


@router.get("", response_model=Note | None)
def get_editing(controller: ControllerDep) -> Note | None:
    return controller.state.editing


async def _flush_open_note(controller: NoteController) -> None:
    if not await controller.close_editor(flush=True):
        raise_for_controller(controller, "Open note was not saved")


@router.post("/new", response_model=Note)
async def new_note(
    controller: ControllerDep,
    request: NewNoteRequest | None = None,
    flush: bool = False,
) -> Note:
    """
    Start a new, unsaved draft. With ``flush=true`` the open note is saved first.
    """
    if flush:
        await _flush_open_note(controller)
    return await controller.new_note(title=request.title if request else "")


@router.post("/open/{note_id}", response_model=Note)
async def open_note(note_id: int, controller: ControllerDep, flush: bool = False) -> Note:
    """
    Open a stored note. The previously open note is replaced without saving
    unless ``flush=true``.
    """
    if flush:
        await _flush_open_note(controller)
    note = await controller.edit(note_id)
    if note is None:
        raise_for_controller(controller, f"Could not open note {note_id}")
    assert note is not None
    return note


@router.patch("", response_model=Note)
async def update_editing(update_data: EditorUpdate, controller: ControllerDep) -> Note:
    """
    Change the open note in memory and restart the auto-save timer.
    """
    note = await controller.update_editing(title=update_data.title, body=update_data.body)
    if note is None:
        raise _no_open_note()
    controller.schedule_autosave()
    return note


@router.post("/save", response_model=Note)
async def save_editing(controller: ControllerDep) -> Note:
    """
    Save the open note. Drafts are inserted and get their id.
    """
    if controller.state.editing is None:
        raise _no_open_note()
    note = await controller.save_editing()
    if note is None:
        raise_for_controller(controller, "Note was not saved")
    assert note is not None
    return note


@router.post("/close")
async def close_editor(controller: ControllerDep, flush: bool = False) -> dict:
    """
    Close the editor, saving first when ``flush=true``.
    """
    if not await controller.close_editor(flush=flush):
        raise_for_controller(controller, "Note was not saved")
    return {"success": True}
